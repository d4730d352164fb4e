"""
Shared test fixtures and pytest configuration.

Markers:
    @pytest.mark.elm: requires the real Elm toolchain (elm, elm-test) on PATH

Run only the fast suite:
    pytest -m "not elm"
"""

import json
import shutil
import sys
from pathlib import Path
from typing import Optional

import pytest

from elm_ai.config import EngineConfig
from elm_ai.oracle.backends.mock import MockOracle
from elm_ai.synthesis.types import CandidateFragment, ModuleSource


def _elm_available() -> bool:
    """Check if the compiler and test runner are both on PATH."""
    return bool(shutil.which("elm") and shutil.which("elm-test"))


_ELM_OK: Optional[bool] = None


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "elm: requires the Elm toolchain (elm, elm-test) on PATH")


def pytest_collection_modifyitems(config, items):
    """Auto-skip tests whose toolchain requirements are not met."""
    global _ELM_OK

    if _ELM_OK is None:
        _ELM_OK = _elm_available()

    skip_elm = pytest.mark.skip(reason="Elm toolchain not available")
    for item in items:
        if "elm" in item.keywords and not _ELM_OK:
            item.add_marker(skip_elm)


MAIN_MODULE = """\
module Main exposing (main, greet)

import Html exposing (text)


greet : String -> String
greet name =
    "Hello " ++ name ++ "!"


main =
    text (greet "world")
"""

PROJECT_MANIFEST = {
    "type": "application",
    "source-directories": ["src"],
    "elm-version": "0.19.1",
    "dependencies": {
        "direct": {"elm/browser": "1.0.2", "elm/core": "1.0.5", "elm/html": "1.0.0"},
        "indirect": {"elm/json": "1.1.3", "elm/time": "1.0.0", "elm/url": "1.0.0", "elm/virtual-dom": "1.0.3"},
    },
    "test-dependencies": {"direct": {}, "indirect": {}},
}


@pytest.fixture
def project(tmp_path) -> Path:
    """A minimal Elm application on disk."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "Main.elm").write_text(MAIN_MODULE, encoding="utf-8")
    (tmp_path / "elm.json").write_text(json.dumps(PROJECT_MANIFEST, indent=4), encoding="utf-8")
    return tmp_path


@pytest.fixture
def main_module() -> ModuleSource:
    return ModuleSource(text=MAIN_MODULE)


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(oracle_backend="mock", timeout_s=10)


@pytest.fixture
def python_config() -> EngineConfig:
    """Point every tool at the running interpreter; tests pass scripts as arguments."""
    return EngineConfig(
        compiler=sys.executable,
        test_runner=sys.executable,
        formatter=sys.executable,
        timeout_s=10,
    )


def syntax_error_judge(text: str) -> Optional[str]:
    """Fail any unit that contains the marker a broken candidate carries."""
    if "<<SYNTAX ERROR>>" in text:
        return "-- PARSE ERROR ------------- .elm-ai/ElmAiCandidate.elm\n\nI got stuck here."
    return None


@pytest.fixture
def judging_oracle() -> MockOracle:
    return MockOracle(judge=syntax_error_judge)


@pytest.fixture
def abc_candidates() -> list:
    return [
        CandidateFragment(name="alpha", signature="Int -> Int", body="alpha x =\n    x + 1"),
        CandidateFragment(name="beta", signature="Int -> Int", body="beta x =\n    x <<SYNTAX ERROR>> 2"),
        CandidateFragment(name="gamma", signature="String", body='"gamma"'),
    ]
