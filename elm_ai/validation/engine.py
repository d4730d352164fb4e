"""
Validation engine: the three oracle-driven flows behind one facade.

    compile_check   one unit with every candidate, one verdict
    validate_batch  isolated per-candidate verdicts
    check_decoder   decoder equivalence test under the test runner

Each flow runs strictly in order: provision the workspace, materialize
the manifest, synthesize, write, invoke. The engine never retries; a
failed verdict goes back to the caller, who decides what to try next.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path
from typing import Sequence

from elm_ai.config import EngineConfig
from elm_ai.oracle.backend import Oracle, build_oracle
from elm_ai.oracle.backends.subprocess_oracle import SubprocessOracle
from elm_ai.oracle.types import FormatResult, OracleOutcome
from elm_ai.synthesis.decoder_test import DecoderTestBuilder, DecoderTestSpec
from elm_ai.synthesis.module_synthesizer import synthesize
from elm_ai.synthesis.types import CandidateFragment, ModuleSource
from elm_ai.validation.isolation import BatchResult, IsolationStrategy, check_unique_names
from elm_ai.workspace.provisioner import MANIFEST_NAME, Workspace, ensure_workspace

LOG = logging.getLogger("validation.engine")


class EnginePhase(StrEnum):
    IDLE = "idle"
    PROVISIONING = "provisioning"
    SYNTHESIZING = "synthesizing"
    INVOKING = "invoking"
    PASSED = "passed"
    FAILED = "failed"


def _coerce_module(module: ModuleSource | str | Path, project_root: Path) -> ModuleSource:
    if isinstance(module, ModuleSource):
        return module
    path = Path(module)
    return ModuleSource.from_file(path if path.is_absolute() else project_root / path)


class ValidationEngine:
    """
    Validates candidate fragments against a project with the host toolchain.

    Usage::

        engine = ValidationEngine("/path/to/project")
        result = await engine.validate_batch("src/Main.elm", candidates)
    """

    def __init__(
        self,
        project_root: str | Path,
        oracle: Oracle | None = None,
        config: EngineConfig | None = None,
        manifest_path: str | Path | None = None,
    ) -> None:
        self._config = config or EngineConfig.from_env()
        self._project_root = Path(project_root)
        self._manifest_path = Path(manifest_path) if manifest_path else self._project_root / MANIFEST_NAME
        if oracle is None:
            if self._config.oracle_backend == "subprocess":
                oracle = SubprocessOracle.from_config(self._config)
            else:
                oracle = build_oracle(self._config.oracle_backend)
        self._oracle = oracle
        self._test_builder = DecoderTestBuilder()
        self.phase = EnginePhase.IDLE
        self.history: list[OracleOutcome] = []

    @property
    def oracle(self) -> Oracle:
        return self._oracle

    def _enter(self, phase: EnginePhase) -> None:
        LOG.debug("Phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase

    def _finish(self, outcome: OracleOutcome) -> OracleOutcome:
        self.history.append(outcome)
        self._enter(EnginePhase.PASSED if outcome.passed else EnginePhase.FAILED)
        return outcome

    def provision(self, standalone: bool = False) -> Workspace:
        """
        Ensure the workspace exists and its manifest is current.

        Raises ConfigurationError if the project manifest cannot be loaded.
        """
        self._enter(EnginePhase.PROVISIONING)
        try:
            workspace = ensure_workspace(self._project_root, self._config.workspace_dir)
            if standalone:
                workspace.materialize_default_manifest()
            else:
                workspace.materialize_manifest(self._manifest_path)
        except Exception:
            self._enter(EnginePhase.IDLE)
            raise
        return workspace

    async def compile_check(
        self,
        module: ModuleSource | str | Path,
        candidates: Sequence[CandidateFragment] | str,
    ) -> OracleOutcome:
        """Compile the module with every candidate (or one merged change) at once."""
        workspace = self.provision()
        try:
            source = _coerce_module(module, self._project_root)

            self._enter(EnginePhase.SYNTHESIZING)
            if isinstance(candidates, str):
                appended = candidates
            else:
                check_unique_names(candidates)
                appended = "\n\n".join(c.render() for c in candidates)
            unit = synthesize(
                source,
                appended,
                module_name=self._config.private_module,
                strict=self._config.strict_header,
            )

            self._enter(EnginePhase.INVOKING)
            outcome = await self._isolation(workspace).check_unit(unit)
        except Exception:
            self._enter(EnginePhase.IDLE)
            raise
        return self._finish(outcome)

    async def validate_batch(
        self,
        module: ModuleSource | str | Path,
        candidates: Sequence[CandidateFragment],
    ) -> BatchResult:
        """One isolated verdict per candidate."""
        workspace = self.provision()
        try:
            source = _coerce_module(module, self._project_root)
            self._enter(EnginePhase.SYNTHESIZING)
            check_unique_names(candidates)

            self._enter(EnginePhase.INVOKING)
            result = await self._isolation(workspace).validate_batch(source, candidates)
        except Exception:
            self._enter(EnginePhase.IDLE)
            raise
        self.history.extend(v.outcome for v in result.verdicts)
        self._enter(EnginePhase.PASSED if result.all_passed else EnginePhase.FAILED)
        if result.failed:
            LOG.info("Batch of %d: failing candidates %s", len(candidates), ", ".join(result.failed))
        return result

    async def check_decoder(self, spec: DecoderTestSpec, standalone: bool = False) -> OracleOutcome:
        """
        Run the decoder equivalence test for *spec*.

        With *standalone*, the workspace uses the built-in test manifest
        instead of one derived from the project.
        """
        workspace = self.provision(standalone=standalone)
        try:
            self._enter(EnginePhase.SYNTHESIZING)
            test_path = self._test_builder.build(spec, workspace)
            self._enter(EnginePhase.INVOKING)
            outcome = await self._oracle.test_check(test_path, workspace.root)
        except Exception:
            self._enter(EnginePhase.IDLE)
            raise
        return self._finish(outcome)

    async def format_source(self, source: str) -> FormatResult:
        """Format *source* with the oracle's formatter; never raises on bad input."""
        return await self._oracle.format(source)

    def _isolation(self, workspace: Workspace) -> IsolationStrategy:
        return IsolationStrategy(
            self._oracle,
            workspace,
            module_name=self._config.private_module,
            strict=self._config.strict_header,
        )
