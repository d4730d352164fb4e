"""Tests for per-candidate isolation."""

import pytest

from elm_ai.errors import ConfigurationError, HeaderNotFoundError
from elm_ai.oracle.backends.mock import MockOracle
from elm_ai.synthesis.module_synthesizer import find_header, synthesize
from elm_ai.synthesis.types import CandidateFragment, ModuleSource
from elm_ai.validation.isolation import BatchResult, IsolationStrategy, isolated_material
from elm_ai.workspace.provisioner import ensure_workspace


@pytest.fixture
def workspace(tmp_path):
    return ensure_workspace(tmp_path)


class TestIsolatedMaterial:
    def test_focus_real_others_stubbed(self, abc_candidates):
        alpha, beta, gamma = abc_candidates
        text = isolated_material(alpha, abc_candidates)
        assert "x + 1" in text
        assert "<<SYNTAX ERROR>>" not in text
        assert 'beta =\n    Debug.todo "beta"' in text
        assert 'gamma =\n    Debug.todo "gamma"' in text

    def test_batch_order_kept(self, abc_candidates):
        text = isolated_material(abc_candidates[2], abc_candidates)
        assert text.index("alpha :") < text.index("beta :") < text.index("gamma :")

    def test_every_signature_present(self, abc_candidates):
        for focus in abc_candidates:
            text = isolated_material(focus, abc_candidates)
            for c in abc_candidates:
                assert f"{c.name} : {c.signature}" in text


class TestValidateBatch:
    @pytest.mark.asyncio
    async def test_only_broken_candidate_fails(self, workspace, main_module, judging_oracle, abc_candidates):
        strategy = IsolationStrategy(judging_oracle, workspace)
        result = await strategy.validate_batch(main_module, abc_candidates)

        assert [v.name for v in result.verdicts] == ["alpha", "beta", "gamma"]
        assert result.outcomes["alpha"].passed
        assert not result.outcomes["beta"].passed
        assert result.outcomes["gamma"].passed
        assert result.failed == ["beta"]
        assert "PARSE ERROR" in result.outcomes["beta"].diagnostics

    @pytest.mark.asyncio
    async def test_naive_single_unit_fails_everything(self, workspace, main_module, judging_oracle, abc_candidates):
        """Without stubbing, one broken body poisons the whole unit."""
        strategy = IsolationStrategy(judging_oracle, workspace)
        merged = "\n\n".join(c.render() for c in abc_candidates)
        outcome = await strategy.check_unit(synthesize(main_module, merged))
        assert not outcome.passed

    @pytest.mark.asyncio
    async def test_one_invocation_per_candidate_no_early_exit(self, workspace, main_module, abc_candidates):
        oracle = MockOracle(mode="fail")
        result = await IsolationStrategy(oracle, workspace).validate_batch(main_module, abc_candidates)
        assert len(oracle.call_log) == 3
        assert result.failed == ["alpha", "beta", "gamma"]

    @pytest.mark.asyncio
    async def test_unit_written_before_invocation(self, workspace, main_module, abc_candidates):
        oracle = MockOracle()
        await IsolationStrategy(oracle, workspace).validate_batch(main_module, abc_candidates)
        for call, focus in zip(oracle.call_log, abc_candidates):
            assert call.path == workspace.private_dir / "ElmAiCandidate.elm"
            assert find_header(call.text).name == "ElmAiCandidate"
            assert focus.render() in call.text

    @pytest.mark.asyncio
    async def test_custom_private_module(self, workspace, main_module, abc_candidates):
        oracle = MockOracle()
        strategy = IsolationStrategy(oracle, workspace, module_name="Hidden.Unit")
        await strategy.validate_batch(main_module, abc_candidates[:1])
        assert oracle.call_log[0].path == workspace.private_dir / "Hidden" / "Unit.elm"

    @pytest.mark.asyncio
    async def test_empty_batch(self, workspace, main_module):
        oracle = MockOracle()
        result = await IsolationStrategy(oracle, workspace).validate_batch(main_module, [])
        assert result.verdicts == []
        assert result.all_passed
        assert oracle.call_log == []

    @pytest.mark.asyncio
    async def test_duplicate_names_rejected(self, workspace, main_module):
        dupes = [CandidateFragment(name="a", body="1"), CandidateFragment(name="a", body="2")]
        oracle = MockOracle()
        with pytest.raises(ConfigurationError, match="Duplicate"):
            await IsolationStrategy(oracle, workspace).validate_batch(main_module, dupes)
        assert oracle.call_log == []

    @pytest.mark.asyncio
    async def test_strict_header(self, workspace, abc_candidates):
        headerless = ModuleSource(text="main = 1\n")
        with pytest.raises(HeaderNotFoundError):
            await IsolationStrategy(MockOracle(), workspace).validate_batch(headerless, abc_candidates)

    @pytest.mark.asyncio
    async def test_lenient_header(self, workspace, abc_candidates):
        headerless = ModuleSource(text="main = 1\n")
        strategy = IsolationStrategy(MockOracle(), workspace, strict=False)
        result = await strategy.validate_batch(headerless, abc_candidates)
        assert result.all_passed


class TestBatchResult:
    @pytest.mark.asyncio
    async def test_to_dict(self, workspace, main_module, judging_oracle, abc_candidates):
        result = await IsolationStrategy(judging_oracle, workspace).validate_batch(main_module, abc_candidates)
        d = result.to_dict()
        assert d["all_passed"] is False
        assert d["failed"] == ["beta"]
        assert d["verdicts"][1]["name"] == "beta"
        assert d["verdicts"][1]["passed"] is False
        assert d["verdicts"][0]["diagnostics"] == ""

    def test_empty(self):
        assert BatchResult().to_dict() == {"all_passed": True, "failed": [], "verdicts": []}
