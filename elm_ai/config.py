"""Configuration management for the validation engine.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from elm_ai.errors import ConfigurationError

_MODULE_NAME = re.compile(r"^[A-Z][A-Za-z0-9_]*(\.[A-Z][A-Za-z0-9_]*)*$")
_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class EngineConfig:
    """Settings shared by the workspace, the oracle and the engine."""

    compiler: str = "elm"
    test_runner: str = "elm-test"
    formatter: str = "elm-format"
    workspace_dir: str = "elm-stuff/elm-ai"
    private_module: str = "ElmAiCandidate"
    discard_target: str = "/dev/null"
    timeout_s: float = 120.0  # 0 = wait forever
    strict_header: bool = True
    oracle_backend: str = "subprocess"  # "subprocess", "mock"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        for name in ("compiler", "test_runner", "formatter", "workspace_dir"):
            if not getattr(self, name).strip():
                raise ConfigurationError(f"{name} must not be empty")
        if self.timeout_s < 0:
            raise ConfigurationError(f"timeout_s must be >= 0, got {self.timeout_s}")
        if not _MODULE_NAME.match(self.private_module):
            raise ConfigurationError(f"private_module is not a valid module name: {self.private_module!r}")

    @property
    def timeout(self) -> float | None:
        """Timeout in seconds for ``asyncio.wait_for``, or None for no bound."""
        return self.timeout_s or None

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            compiler=os.getenv("ELM_AI_COMPILER", "elm"),
            test_runner=os.getenv("ELM_AI_TEST_RUNNER", "elm-test"),
            formatter=os.getenv("ELM_AI_FORMATTER", "elm-format"),
            workspace_dir=os.getenv("ELM_AI_WORKSPACE_DIR", "elm-stuff/elm-ai"),
            private_module=os.getenv("ELM_AI_PRIVATE_MODULE", "ElmAiCandidate"),
            discard_target=os.getenv("ELM_AI_DISCARD_TARGET", "/dev/null"),
            timeout_s=_env_float("ELM_AI_TIMEOUT_S", 120.0),
            strict_header=_env_bool("ELM_AI_STRICT_HEADER", True),
            oracle_backend=os.getenv("ELM_AI_ORACLE", "subprocess"),
            log_level=os.getenv("ELM_AI_LOG_LEVEL", "INFO").upper(),
        )
