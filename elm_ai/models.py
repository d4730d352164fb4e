"""
Payload models for the tool server.

Pydantic models validate what arrives from the generator and shape what
goes back to it.
"""

from __future__ import annotations

import json
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from elm_ai.errors import ConfigurationError
from elm_ai.oracle.types import FormatResult, OracleOutcome
from elm_ai.synthesis.types import CandidateFragment
from elm_ai.validation.isolation import BatchResult


class Candidate(BaseModel):
    name: str
    signature: str = ""
    body: str = ""

    def to_fragment(self) -> CandidateFragment:
        try:
            return CandidateFragment(name=self.name, signature=self.signature, body=self.body)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc


class Outcome(BaseModel):
    passed: bool
    diagnostics: str
    kind: str
    exitCode: Optional[int] = None
    durationMs: int = 0

    @classmethod
    def from_outcome(cls, outcome: OracleOutcome) -> "Outcome":
        return cls(
            passed=outcome.passed,
            diagnostics=outcome.diagnostics,
            kind=outcome.kind.value,
            exitCode=outcome.exit_code,
            durationMs=outcome.duration_ms,
        )


class Verdict(Outcome):
    name: str


class BatchReport(BaseModel):
    allPassed: bool
    failed: List[str]
    verdicts: List[Verdict]

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchReport":
        return cls(
            allPassed=result.all_passed,
            failed=result.failed,
            verdicts=[
                Verdict(name=v.name, **Outcome.from_outcome(v.outcome).model_dump())
                for v in result.verdicts
            ],
        )


class FormatReport(BaseModel):
    code: str
    formatted: bool
    diagnostics: str = ""

    @classmethod
    def from_result(cls, result: FormatResult) -> "FormatReport":
        return cls(code=result.text, formatted=result.formatted, diagnostics=result.diagnostics)


class DecoderSolution(BaseModel):
    """Generator answer for a decoder task: the code and the value it should decode to."""

    elmCode: str
    decodedElmValue: str

    @classmethod
    def parse(cls, payload: str) -> "DecoderSolution":
        try:
            return cls.model_validate(json.loads(payload))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ConfigurationError(f"Malformed decoder solution: {exc}") from exc
