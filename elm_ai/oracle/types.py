"""
Oracle outcome types.

An ``OracleOutcome`` is the only signal an invocation returns. Its
diagnostics are the tool's raw output, passed through verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class OutcomeKind(StrEnum):
    """How an oracle invocation ended."""

    PASSED = "passed"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class OracleOutcome:
    """
    Pass/fail verdict of one oracle invocation.

    Invariant: ``passed`` is True exactly when ``diagnostics`` is empty.
    """

    passed: bool
    diagnostics: str = ""
    kind: OutcomeKind = OutcomeKind.PASSED
    command: tuple[str, ...] = ()
    exit_code: int | None = None
    duration_ms: int = 0

    def __post_init__(self) -> None:
        if self.passed != (self.diagnostics == ""):
            raise ValueError("passed must be True exactly when diagnostics is empty")
        if self.passed != (self.kind == OutcomeKind.PASSED):
            raise ValueError(f"passed={self.passed} is inconsistent with kind={self.kind}")

    @classmethod
    def success(cls, command: tuple[str, ...] = (), duration_ms: int = 0) -> "OracleOutcome":
        return cls(passed=True, command=command, exit_code=0, duration_ms=duration_ms)

    @classmethod
    def failure(
        cls,
        diagnostics: str,
        command: tuple[str, ...] = (),
        exit_code: int | None = None,
        duration_ms: int = 0,
        kind: OutcomeKind = OutcomeKind.FAILED,
    ) -> "OracleOutcome":
        if not diagnostics:
            program = command[0] if command else "oracle"
            diagnostics = f"{program} exited with code {exit_code}"
        return cls(
            passed=False,
            diagnostics=diagnostics,
            kind=kind,
            command=command,
            exit_code=exit_code,
            duration_ms=duration_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "diagnostics": self.diagnostics,
            "kind": self.kind.value,
            "command": list(self.command),
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
        }


@dataclass
class ProcessResult:
    """Raw result of running an external command."""

    command: tuple[str, ...]
    exit_code: int | None
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False

    @property
    def output(self) -> str:
        """stdout followed by stderr; relative order between the two is not preserved."""
        return self.stdout + self.stderr


@dataclass(frozen=True)
class FormatResult:
    """Formatter output. When ``formatted`` is False, ``text`` is the input unchanged."""

    text: str
    formatted: bool
    diagnostics: str = ""
