"""
Run an external command and capture its output.

Spawn failures raise ``SpawnError``. Any exit status, including a
timeout, comes back as a ``ProcessResult``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from pathlib import Path

from elm_ai.errors import ConfigurationError, SpawnError
from elm_ai.oracle.types import ProcessResult

LOG = logging.getLogger("oracle.process")

# Upper bound on collecting output once a timed-out process group is killed.
DRAIN_TIMEOUT_S = 5.0


def _kill_group(process: asyncio.subprocess.Process) -> None:
    """SIGKILL the child and everything it spawned (the child leads its own session)."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        LOG.debug("Process group %d already gone", process.pid)


async def _drain(process: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
    try:
        return await asyncio.wait_for(process.communicate(), timeout=DRAIN_TIMEOUT_S)
    except asyncio.TimeoutError:
        LOG.warning("Output of killed process %d still open after %.1fs; discarding it", process.pid, DRAIN_TIMEOUT_S)
        return b"", b""


async def run_process(
    command: list[str],
    cwd: str | Path | None = None,
    stdin: str | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """
    Spawn *command*, feed it *stdin*, wait for it to exit.

    With a *timeout*, the child and every process it started are killed
    once it runs longer than that, and the result is marked ``timed_out``.
    """
    if not command:
        raise ValueError("command must not be empty")
    if cwd is not None and not Path(cwd).is_dir():
        raise ConfigurationError(f"Working directory does not exist: {cwd}")

    argv = tuple(str(part) for part in command)
    LOG.info("Running %s (cwd=%s)", " ".join(argv), cwd or ".")
    start = time.perf_counter()
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd is not None else None,
            start_new_session=True,
        )
    except OSError as exc:
        raise SpawnError(list(argv), str(exc)) from exc

    payload = stdin.encode("utf-8") if stdin is not None else None
    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(payload), timeout=timeout)
    except asyncio.TimeoutError:
        _kill_group(process)
        stdout_bytes, stderr_bytes = await _drain(process)
        duration_ms = int((time.perf_counter() - start) * 1000)
        LOG.warning("%s timed out after %.1fs", argv[0], timeout)
        return ProcessResult(
            command=argv,
            exit_code=process.returncode,
            stdout=stdout_bytes.decode(errors="replace"),
            stderr=stderr_bytes.decode(errors="replace"),
            duration_ms=duration_ms,
            timed_out=True,
        )

    duration_ms = int((time.perf_counter() - start) * 1000)
    LOG.debug("%s exited with %s in %dms", argv[0], process.returncode, duration_ms)
    return ProcessResult(
        command=argv,
        exit_code=process.returncode,
        stdout=stdout_bytes.decode(errors="replace"),
        stderr=stderr_bytes.decode(errors="replace"),
        duration_ms=duration_ms,
    )
