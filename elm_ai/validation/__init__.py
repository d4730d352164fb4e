"""Candidate validation: isolated batch checks and the engine facade."""

from __future__ import annotations

from elm_ai.validation.engine import EnginePhase, ValidationEngine
from elm_ai.validation.isolation import BatchResult, CandidateVerdict, IsolationStrategy

__all__ = [
    "BatchResult",
    "CandidateVerdict",
    "EnginePhase",
    "IsolationStrategy",
    "ValidationEngine",
]
