"""
elm-ai: validate generated Elm fragments with the Elm toolchain as oracle.

Candidates are spliced into private copies of real modules inside a
hidden workspace, compiled or tested, and reduced to pass/fail verdicts
with the tool's raw diagnostics.
"""

from __future__ import annotations

from elm_ai.config import EngineConfig
from elm_ai.errors import ConfigurationError, ElmAiError, HeaderNotFoundError, SpawnError
from elm_ai.oracle import FormatResult, Oracle, OracleOutcome, OutcomeKind, build_oracle
from elm_ai.synthesis import (
    CandidateFragment,
    DecoderTestBuilder,
    DecoderTestSpec,
    ModuleSource,
    SynthesizedUnit,
    synthesize,
)
from elm_ai.validation import BatchResult, CandidateVerdict, EnginePhase, IsolationStrategy, ValidationEngine
from elm_ai.workspace import ManifestDescriptor, Workspace, ensure_workspace

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "CandidateFragment",
    "CandidateVerdict",
    "ConfigurationError",
    "DecoderTestBuilder",
    "DecoderTestSpec",
    "ElmAiError",
    "EngineConfig",
    "EnginePhase",
    "FormatResult",
    "HeaderNotFoundError",
    "IsolationStrategy",
    "ManifestDescriptor",
    "ModuleSource",
    "Oracle",
    "OracleOutcome",
    "OutcomeKind",
    "SpawnError",
    "SynthesizedUnit",
    "ValidationEngine",
    "Workspace",
    "build_oracle",
    "ensure_workspace",
    "synthesize",
]
