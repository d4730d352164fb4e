"""
Oracle invocation: run the external toolchain and reduce its exit status
and output to a pass/fail outcome.
"""

from __future__ import annotations

from elm_ai.oracle.backend import Oracle, build_oracle
from elm_ai.oracle.types import FormatResult, OracleOutcome, OutcomeKind, ProcessResult

__all__ = [
    "FormatResult",
    "Oracle",
    "OracleOutcome",
    "OutcomeKind",
    "ProcessResult",
    "build_oracle",
]
