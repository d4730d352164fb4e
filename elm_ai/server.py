from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from elm_ai.config import EngineConfig
from elm_ai.models import BatchReport, Candidate, DecoderSolution, FormatReport, Outcome
from elm_ai.synthesis.decoder_test import TIME_IMPORTS, DecoderTestSpec
from elm_ai.validation.engine import ValidationEngine

LOG = logging.getLogger("elm_ai.server")


def _validate_required(name: str, value: Optional[str]) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required field: {name}")


def _json_payload(model) -> dict:
    return model.model_dump(mode="json")


def _candidates(raw: List[dict]) -> list:
    return [Candidate.model_validate(item).to_fragment() for item in raw]


def build_server(config: Optional[EngineConfig] = None) -> FastMCP:
    config = config or EngineConfig.from_env()
    server = FastMCP("elm-ai")

    def engine_for(project_root: str) -> ValidationEngine:
        return ValidationEngine(Path(project_root), config=config)

    @server.tool(
        description="Compile a module with all candidate declarations appended and return one verdict."
    )
    async def compile_check_tool(
        projectRoot: str,
        modulePath: str,
        candidates: Optional[List[dict]] = None,
        code: Optional[str] = None,
    ) -> dict:
        _validate_required("projectRoot", projectRoot)
        _validate_required("modulePath", modulePath)
        if candidates is None and code is None:
            raise ValueError("Provide either candidates or code")
        engine = engine_for(projectRoot)
        appended = code if code is not None else _candidates(candidates or [])
        outcome = await engine.compile_check(modulePath, appended)
        return _json_payload(Outcome.from_outcome(outcome))

    @server.tool(
        description="Check each candidate declaration on its own, stubbing the others, and report which fail."
    )
    async def validate_candidates_tool(
        projectRoot: str,
        modulePath: str,
        candidates: List[dict],
    ) -> dict:
        _validate_required("projectRoot", projectRoot)
        _validate_required("modulePath", modulePath)
        engine = engine_for(projectRoot)
        result = await engine.validate_batch(modulePath, _candidates(candidates))
        return _json_payload(BatchReport.from_result(result))

    @server.tool(
        description="Run a decoder against a JSON sample under elm-test and compare with the expected value."
    )
    async def test_decoder_tool(
        projectRoot: str,
        sampleJson: str,
        solution: str,
        typeDefinition: str = "",
    ) -> dict:
        _validate_required("projectRoot", projectRoot)
        _validate_required("solution", solution)
        parsed = DecoderSolution.parse(solution)
        spec = DecoderTestSpec(
            decoder_code=parsed.elmCode,
            sample_json=sampleJson,
            expected_value=parsed.decodedElmValue,
            type_definitions=typeDefinition,
            extra_imports=list(TIME_IMPORTS),
        )
        outcome = await engine_for(projectRoot).check_decoder(spec, standalone=True)
        return _json_payload(Outcome.from_outcome(outcome))

    @server.tool(description="Format Elm source with elm-format; unformattable code is returned unchanged.")
    async def format_elm_tool(code: str) -> dict:
        engine = engine_for(".")
        return _json_payload(FormatReport.from_result(await engine.format_source(code)))

    return server


def main() -> None:
    config = EngineConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    server = build_server(config)
    server.run()


if __name__ == "__main__":
    main()
