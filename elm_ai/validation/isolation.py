"""
Isolation strategy: attribute compile failures to individual candidates.

For a batch of N candidates, N units are compiled. Unit *i* carries the
real implementation of candidate *i* and a ``Debug.todo`` stub with the
same name and annotation for every other candidate, so a broken body
elsewhere in the batch cannot leak into candidate *i*'s verdict. Units
are checked one at a time; the compiler shares its build cache inside
the workspace and concurrent runs would race on it. There is no early
exit: every candidate gets exactly one verdict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from elm_ai.errors import ConfigurationError
from elm_ai.oracle.backend import Oracle
from elm_ai.oracle.types import OracleOutcome
from elm_ai.synthesis.module_synthesizer import DEFAULT_PRIVATE_MODULE, synthesize
from elm_ai.synthesis.types import CandidateFragment, ModuleSource, SynthesizedUnit
from elm_ai.workspace.provisioner import Workspace

LOG = logging.getLogger("validation.isolation")


@dataclass(frozen=True)
class CandidateVerdict:
    """Outcome attributed to a single candidate."""

    name: str
    outcome: OracleOutcome

    @property
    def passed(self) -> bool:
        return self.outcome.passed


@dataclass
class BatchResult:
    """Verdicts for a batch, in submission order."""

    verdicts: list[CandidateVerdict] = field(default_factory=list)

    @property
    def outcomes(self) -> dict[str, OracleOutcome]:
        return {v.name: v.outcome for v in self.verdicts}

    @property
    def failed(self) -> list[str]:
        return [v.name for v in self.verdicts if not v.passed]

    @property
    def all_passed(self) -> bool:
        return all(v.passed for v in self.verdicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "all_passed": self.all_passed,
            "failed": self.failed,
            "verdicts": [{"name": v.name, **v.outcome.to_dict()} for v in self.verdicts],
        }


def check_unique_names(candidates: Sequence[CandidateFragment]) -> None:
    seen: set[str] = set()
    for candidate in candidates:
        if candidate.name in seen:
            raise ConfigurationError(f"Duplicate candidate name in batch: {candidate.name!r}")
        seen.add(candidate.name)


def isolated_material(focus: CandidateFragment, candidates: Sequence[CandidateFragment]) -> str:
    """Render *focus* for real and every other candidate as a stub, keeping batch order."""
    return "\n\n".join(c.render() if c is focus else c.stub() for c in candidates)


class IsolationStrategy:
    """
    Runs one compile check per candidate with all other candidates stubbed.

    Usage::

        strategy = IsolationStrategy(oracle, workspace)
        result = await strategy.validate_batch(module, candidates)
        result.failed  # names whose own body does not compile
    """

    def __init__(
        self,
        oracle: Oracle,
        workspace: Workspace,
        module_name: str = DEFAULT_PRIVATE_MODULE,
        strict: bool = True,
    ) -> None:
        self._oracle = oracle
        self._workspace = workspace
        self._module_name = module_name
        self._strict = strict

    def build_unit(self, module: ModuleSource, focus: CandidateFragment, candidates: Sequence[CandidateFragment]) -> SynthesizedUnit:
        return synthesize(
            module,
            isolated_material(focus, candidates),
            module_name=self._module_name,
            strict=self._strict,
        )

    def unit_path(self, unit: SynthesizedUnit) -> Path:
        return self._workspace.private_dir / unit.path

    async def check_unit(self, unit: SynthesizedUnit) -> OracleOutcome:
        """Write *unit* into the private root, then compile it."""
        path = self.unit_path(unit)
        self._workspace.write_source(path.relative_to(self._workspace.root), unit.text)
        return await self._oracle.compile_check(path, self._workspace.root)

    async def validate_batch(
        self,
        module: ModuleSource,
        candidates: Sequence[CandidateFragment],
    ) -> BatchResult:
        check_unique_names(candidates)
        result = BatchResult()
        for index, candidate in enumerate(candidates, start=1):
            unit = self.build_unit(module, candidate, candidates)
            outcome = await self.check_unit(unit)
            LOG.info(
                "Candidate %d/%d %s: %s",
                index,
                len(candidates),
                candidate.name,
                outcome.kind.value,
            )
            result.verdicts.append(CandidateVerdict(name=candidate.name, outcome=outcome))
        return result
