"""
Mock oracle for testing.

Reads the unit it is asked to check from disk, like the real compiler
would, and records what it saw. Modes:

    "pass"    - every check passes
    "fail"    - every check fails
    "timeout" - every check times out

A *judge* callable overrides the mode: it receives the unit's text and
returns diagnostics for a failure or None for a pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from elm_ai.oracle.backend import Oracle
from elm_ai.oracle.types import FormatResult, OracleOutcome, OutcomeKind

LOG = logging.getLogger("oracle.backends.mock")

Judge = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class MockCall:
    kind: str  # "compile", "test", "format"
    path: Path | None
    text: str


class MockOracle(Oracle):
    """In-memory oracle with call logging."""

    def __init__(
        self,
        mode: str = "pass",
        judge: Judge | None = None,
        formatter: Callable[[str], str] | None = None,
        **kwargs: Any,
    ) -> None:
        if mode not in ("pass", "fail", "timeout"):
            raise ValueError(f"Unknown mock mode: {mode!r}")
        self.mode = mode
        self.judge = judge
        self.formatter = formatter
        self.call_log: list[MockCall] = []

    def _verdict(self, kind: str, path: Path, cwd: Path) -> OracleOutcome:
        target = path if path.is_absolute() else cwd / path
        text = target.read_text(encoding="utf-8")
        self.call_log.append(MockCall(kind=kind, path=target, text=text))
        command = ("mock", kind, str(target))

        if self.judge is not None:
            diagnostics = self.judge(text)
            if diagnostics is None:
                return OracleOutcome.success(command=command)
            return OracleOutcome.failure(diagnostics, command=command, exit_code=1)

        if self.mode == "fail":
            return OracleOutcome.failure("mock failure", command=command, exit_code=1)
        if self.mode == "timeout":
            return OracleOutcome.failure("mock timeout", command=command, kind=OutcomeKind.TIMEOUT)
        return OracleOutcome.success(command=command)

    async def compile_check(self, unit_path: Path, cwd: Path) -> OracleOutcome:
        return self._verdict("compile", unit_path, cwd)

    async def test_check(self, test_path: Path, cwd: Path) -> OracleOutcome:
        return self._verdict("test", test_path, cwd)

    async def format(self, source: str) -> FormatResult:
        self.call_log.append(MockCall(kind="format", path=None, text=source))
        if self.mode == "fail" or self.formatter is None:
            return FormatResult(text=source, formatted=False, diagnostics="mock formatter skipped")
        return FormatResult(text=self.formatter(source), formatted=True)
