"""
Module synthesizer: splice candidate material into a copy of a module.

The copy gets a fixed private identity that exposes everything, so it
can sit next to the original without a name clash and every internal
declaration stays reachable. Nothing here parses the host language; the
compiler does that.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from elm_ai.errors import HeaderNotFoundError
from elm_ai.synthesis.types import ModuleSource, SynthesizedUnit

LOG = logging.getLogger("synthesis.module_synthesizer")

DEFAULT_PRIVATE_MODULE = "ElmAiCandidate"

# `module Foo.Bar exposing (a, B(..))`, optionally `port module`; one level of
# nested parentheses covers constructor exports.
HEADER_PATTERN = re.compile(
    r"^(?P<port>port\s+)?module\s+(?P<name>[A-Z]\w*(?:\.[A-Z]\w*)*)\s+"
    r"exposing\s*\((?P<exposing>(?:[^()]|\([^()]*\))*)\)",
    re.MULTILINE,
)


@dataclass(frozen=True)
class ModuleHeader:
    name: str
    exposing: str
    is_port: bool
    start: int
    end: int


def find_header(text: str) -> ModuleHeader | None:
    match = HEADER_PATTERN.search(text)
    if match is None:
        return None
    return ModuleHeader(
        name=match.group("name"),
        exposing=" ".join(match.group("exposing").split()),
        is_port=match.group("port") is not None,
        start=match.start(),
        end=match.end(),
    )


def _append(text: str, appended: str) -> str:
    if not appended:
        return text
    if text and not text.endswith("\n"):
        text += "\n"
    return f"{text}\n{appended}"


def synthesize(
    original: ModuleSource,
    appended: str,
    module_name: str = DEFAULT_PRIVATE_MODULE,
    strict: bool = False,
) -> SynthesizedUnit:
    """
    Rewrite the identity header of *original* and append *appended*.

    *appended* is never inspected. Without a recognisable header the text
    is passed through with only the appended material added, unless
    *strict* is set, in which case HeaderNotFoundError is raised.
    """
    header = find_header(original.text)
    if header is None:
        where = original.path or "<module>"
        if strict:
            raise HeaderNotFoundError(f"No module header found in {where}")
        LOG.warning("No module header in %s; passing text through unchanged", where)
        return SynthesizedUnit(
            module_name=module_name,
            text=_append(original.text, appended),
            header_rewritten=False,
        )

    prefix = "port " if header.is_port else ""
    rewritten = (
        original.text[: header.start]
        + f"{prefix}module {module_name} exposing (..)"
        + original.text[header.end :]
    )
    LOG.debug("Rewrote header %s -> %s", header.name, module_name)
    return SynthesizedUnit(
        module_name=module_name,
        text=_append(rewritten, appended),
        header_rewritten=True,
    )
