"""
Error taxonomy for the validation engine.

Compile and test failures are not errors: they come back as
``OracleOutcome`` values. The exceptions here cover the cases where no
oracle verdict can be produced at all.
"""

from __future__ import annotations


class ElmAiError(Exception):
    """Base class for engine errors."""

    pass


class ConfigurationError(ElmAiError):
    """Manifest, module source, payload or settings are missing or invalid."""

    pass


class HeaderNotFoundError(ConfigurationError):
    """Raised by strict synthesis when a module has no identity header."""

    pass


class SpawnError(ElmAiError):
    """The oracle executable could not be started."""

    def __init__(self, command: list[str], reason: str) -> None:
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Cannot run {command[0]!r}: {reason}")
