"""
Source synthesis: private-module splicing and decoder test generation.

Pure text transformation; the host language is only ever parsed by the
oracle.
"""

from __future__ import annotations

from elm_ai.synthesis.decoder_test import DecoderTestBuilder, DecoderTestSpec, elm_string_literal
from elm_ai.synthesis.module_synthesizer import DEFAULT_PRIVATE_MODULE, find_header, synthesize
from elm_ai.synthesis.types import CandidateFragment, ModuleSource, SynthesizedUnit

__all__ = [
    "CandidateFragment",
    "DEFAULT_PRIVATE_MODULE",
    "DecoderTestBuilder",
    "DecoderTestSpec",
    "ModuleSource",
    "SynthesizedUnit",
    "elm_string_literal",
    "find_header",
    "synthesize",
]
