"""
Abstract oracle interface.

The compiler, test runner and formatter are treated as ground truth for
validity. Engines talk to them only through this interface, so a fake
oracle can stand in for the real toolchain in tests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from elm_ai.oracle.types import FormatResult, OracleOutcome

LOG = logging.getLogger("oracle.backend")


class Oracle(ABC):
    """
    Interface for the external toolchain.

    Implementations must:
    - return failures as ``OracleOutcome`` values, never raise them
    - raise ``SpawnError`` when the tool itself cannot be started
    - never raise from ``format``
    """

    @abstractmethod
    async def compile_check(self, unit_path: Path, cwd: Path) -> OracleOutcome:
        """Compile *unit_path* (relative to or inside *cwd*) and discard the output."""
        ...

    @abstractmethod
    async def test_check(self, test_path: Path, cwd: Path) -> OracleOutcome:
        """Run the test module at *test_path*."""
        ...

    @abstractmethod
    async def format(self, source: str) -> FormatResult:
        """Format *source*; unformattable input comes back unchanged."""
        ...

    async def close(self) -> None:
        """Release oracle resources. Override if needed."""
        pass


def build_oracle(backend: str, **kwargs: Any) -> Oracle:
    """
    Factory: create an Oracle of the requested type.

    Args:
        backend: "subprocess" or "mock"
        **kwargs: Backend-specific configuration

    Raises:
        ValueError: Unknown backend
    """
    if backend == "subprocess":
        from elm_ai.oracle.backends.subprocess_oracle import SubprocessOracle

        return SubprocessOracle(**kwargs)

    elif backend == "mock":
        from elm_ai.oracle.backends.mock import MockOracle

        return MockOracle(**kwargs)

    else:
        raise ValueError(f"Unknown oracle backend: {backend!r}. Supported: 'subprocess', 'mock'")
