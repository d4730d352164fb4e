"""
Subprocess oracle: drives the real ``elm``, ``elm-test`` and ``elm-format``.

Command shapes::

    <compiler> make <unit> --output <discard>
    <test-runner> <test-module>
    <formatter> --stdin
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from elm_ai.config import EngineConfig
from elm_ai.errors import SpawnError
from elm_ai.oracle.backend import Oracle
from elm_ai.oracle.process import run_process
from elm_ai.oracle.types import FormatResult, OracleOutcome, OutcomeKind, ProcessResult

LOG = logging.getLogger("oracle.backends.subprocess")


def outcome_from_process(result: ProcessResult, timeout: float | None = None) -> OracleOutcome:
    """Reduce a process result to a verdict: exit 0 passes, everything else fails."""
    if result.timed_out:
        notice = f"{result.command[0]} timed out after {timeout}s and was killed"
        output = result.output
        diagnostics = f"{output}\n{notice}" if output else notice
        return OracleOutcome.failure(
            diagnostics,
            command=result.command,
            exit_code=result.exit_code,
            duration_ms=result.duration_ms,
            kind=OutcomeKind.TIMEOUT,
        )
    if result.exit_code == 0:
        return OracleOutcome.success(command=result.command, duration_ms=result.duration_ms)
    return OracleOutcome.failure(
        result.output,
        command=result.command,
        exit_code=result.exit_code,
        duration_ms=result.duration_ms,
    )


def _relative_to(path: Path, cwd: Path) -> str:
    if not path.is_absolute():
        return path.as_posix()
    try:
        return Path(os.path.relpath(path, cwd)).as_posix()
    except ValueError:
        return str(path)


class SubprocessOracle(Oracle):
    """Oracle backed by the host toolchain executables."""

    def __init__(
        self,
        compiler: str = "elm",
        test_runner: str = "elm-test",
        formatter: str = "elm-format",
        discard_target: str = "/dev/null",
        timeout_s: float | None = 120.0,
        **kwargs: Any,
    ) -> None:
        self._compiler = compiler
        self._test_runner = test_runner
        self._formatter = formatter
        self._discard_target = discard_target
        self._timeout = timeout_s or None

    @classmethod
    def from_config(cls, config: EngineConfig) -> "SubprocessOracle":
        return cls(
            compiler=config.compiler,
            test_runner=config.test_runner,
            formatter=config.formatter,
            discard_target=config.discard_target,
            timeout_s=config.timeout,
        )

    async def invoke(self, command: str, args: list[str], cwd: str | Path) -> OracleOutcome:
        """Run ``command args...`` in *cwd* and reduce the result to an outcome."""
        result = await run_process([command, *args], cwd=cwd, timeout=self._timeout)
        return outcome_from_process(result, self._timeout)

    async def compile_check(self, unit_path: Path, cwd: Path) -> OracleOutcome:
        return await self.invoke(
            self._compiler,
            ["make", _relative_to(unit_path, cwd), "--output", self._discard_target],
            cwd,
        )

    async def test_check(self, test_path: Path, cwd: Path) -> OracleOutcome:
        return await self.invoke(self._test_runner, [_relative_to(test_path, cwd)], cwd)

    async def format(self, source: str) -> FormatResult:
        try:
            result = await run_process([self._formatter, "--stdin"], stdin=source, timeout=self._timeout)
        except SpawnError as exc:
            LOG.warning("Formatter unavailable, leaving source unformatted: %s", exc)
            return FormatResult(text=source, formatted=False, diagnostics=str(exc))

        if result.exit_code != 0 or result.timed_out:
            outcome = outcome_from_process(result, self._timeout)
            LOG.warning("Formatter rejected input, leaving source unformatted")
            return FormatResult(text=source, formatted=False, diagnostics=outcome.diagnostics)
        return FormatResult(text=result.stdout, formatted=True)
