"""
Equivalence test builder: wraps a candidate decoder in a unit test.

The generated test decodes one fixed JSON sample and asserts the result
equals one fixed expected value. Whether the candidate fails to compile
or decodes the wrong value, the test runner reports a failure; the two
cases are not told apart here.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from elm_ai.workspace.provisioner import Workspace

LOG = logging.getLogger("synthesis.decoder_test")

DEFAULT_TEST_MODULE = "DecoderTest"

# Imports the original decoder prompts assume; needs the default test manifest.
TIME_IMPORTS = ("Iso8601", "Time exposing (Posix)")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_TEST_TEMPLATE = """\
module {test_module} exposing (all)

import Expect
import Json.Decode exposing (Decoder)
import Test
{extra_imports}
{decoder_code}


all : Test.Test
all =
    Test.test "decoder test" <|
        \\_ ->
            Json.Decode.decodeString {decoder_name} {sample}
                |> Expect.equal (Ok {expected_value}
                                )
{type_definitions}{helpers}"""

_AND_MAP_HELPER = """

andMap : Decoder a -> Decoder (a -> b) -> Decoder b
andMap =
    Json.Decode.map2 (|>)
"""


def elm_string_literal(value: str) -> str:
    """Quote *value* as a single-line Elm string literal."""
    out: list[str] = []
    for ch in value:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{{{ord(ch):04X}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


@dataclass
class DecoderTestSpec:
    """Everything needed to generate one decoder equivalence test."""

    decoder_code: str
    sample_json: Any  # raw JSON text, or a value to serialize
    expected_value: str  # Elm literal, inserted verbatim
    type_definitions: str = ""
    extra_imports: list[str] = field(default_factory=list)
    decoder_name: str = "decoder"
    include_helpers: bool = True
    test_module: str = DEFAULT_TEST_MODULE

    @property
    def sample_text(self) -> str:
        if isinstance(self.sample_json, str):
            return self.sample_json
        return json.dumps(self.sample_json, separators=(",", ":"), ensure_ascii=False)

    def defines(self, name: str) -> bool:
        pattern = re.compile(rf"^{re.escape(name)}\b", re.MULTILINE)
        return bool(pattern.search(self.decoder_code) or pattern.search(self.type_definitions))


class DecoderTestBuilder:
    """
    Builds decoder test modules.

    Usage::

        builder = DecoderTestBuilder()
        test_path = builder.build(spec, workspace)
    """

    def generate_source(self, spec: DecoderTestSpec) -> str:
        """Generate the test module source."""
        extra_imports = "\n".join(
            imp if imp.startswith("import ") else f"import {imp}"
            for imp in (line.strip() for line in spec.extra_imports)
            if imp
        )
        type_definitions = spec.type_definitions.strip("\n")
        helpers = ""
        if spec.include_helpers and not spec.defines("andMap"):
            helpers = _AND_MAP_HELPER

        return _TEST_TEMPLATE.format(
            test_module=spec.test_module,
            extra_imports=extra_imports,
            decoder_code=spec.decoder_code.strip("\n"),
            decoder_name=spec.decoder_name,
            sample=elm_string_literal(spec.sample_text),
            expected_value=spec.expected_value.strip(),
            type_definitions=f"\n\n{type_definitions}\n" if type_definitions else "",
            helpers=helpers,
        )

    def test_path(self, spec: DecoderTestSpec, workspace: Workspace) -> Path:
        return workspace.tests_dir / Path(*spec.test_module.split(".")).with_suffix(".elm")

    def build(self, spec: DecoderTestSpec, workspace: Workspace) -> Path:
        """Generate the test module and write it into the workspace's test root."""
        target = self.test_path(spec, workspace)
        source = self.generate_source(spec)
        workspace.write_source(target.relative_to(workspace.root), source)
        LOG.info("Wrote decoder test %s", target)
        return target
