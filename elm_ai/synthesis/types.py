"""
Data model for candidate fragments and synthesized compilation units.

Candidates arrive from the external generator and are immutable; a
``SynthesizedUnit`` is disposable and superseded by the next one.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from pathlib import Path

from elm_ai.errors import ConfigurationError

_VALUE_NAME = re.compile(r"^[a-z][A-Za-z0-9_]*$")
INDENT = "    "


@dataclass(frozen=True)
class CandidateFragment:
    """A proposed top-level declaration: name, type annotation, implementation."""

    name: str
    signature: str = ""
    body: str = ""

    def __post_init__(self) -> None:
        if not _VALUE_NAME.match(self.name):
            raise ValueError(f"Candidate name must be a lower-case identifier, got {self.name!r}")

    def _annotation(self) -> list[str]:
        signature = self.signature.strip()
        return [f"{self.name} : {signature}"] if signature else []

    def render(self) -> str:
        """
        Emit the declaration as source text.

        A body that starts with its own annotation is used verbatim. A body
        that starts with the candidate's name is a full definition and gets
        the annotation prepended. Anything else is a right-hand side.
        """
        body = self.body.strip("\n")
        head = body.lstrip()
        if re.match(rf"{re.escape(self.name)}\s*:(?!:)", head):
            return body + "\n"
        lines = self._annotation()
        if re.match(rf"{re.escape(self.name)}\b", head):
            lines.append(body)
        else:
            lines.append(f"{self.name} =")
            lines.append(textwrap.indent(textwrap.dedent(body), INDENT))
        return "\n".join(lines) + "\n"

    def stub(self) -> str:
        """Same name and annotation, body type-checks but is never evaluated."""
        lines = self._annotation()
        lines.append(f"{self.name} =")
        lines.append(f'{INDENT}Debug.todo "{self.name}"')
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class ModuleSource:
    """Text of an existing module, read once per round."""

    text: str
    path: Path | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> "ModuleSource":
        source_path = Path(path)
        try:
            return cls(text=source_path.read_text(encoding="utf-8"), path=source_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Cannot read module source {source_path}: {exc}") from exc


@dataclass(frozen=True)
class SynthesizedUnit:
    """A derived module ready to be written into the workspace."""

    module_name: str
    text: str
    header_rewritten: bool

    @property
    def path(self) -> Path:
        """Location relative to the private source root."""
        parts = self.module_name.split(".")
        return Path(*parts[:-1], f"{parts[-1]}.elm")
