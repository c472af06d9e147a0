"""
Extractor module for turning free-form LLM text into action plans.

Public API:
    - normalize: Decode model text into an LLMRpaResponse (never raises)
    - extract_json_block: Locate the JSON object span in model text
    - repair_response: Placeholder plan used when decoding fails
"""

from llm_rpa.extractor.normalizer import (
    extract_json_block,
    normalize,
    repair_response,
)

__all__ = [
    "extract_json_block",
    "normalize",
    "repair_response",
]
