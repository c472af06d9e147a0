"""
Response normalizer: free-form completion text -> validated action plan.

Models wrap their JSON in prose or code fences, truncate it, or return
something that is JSON but not a plan. normalize() always returns an
LLMRpaResponse and never raises:

- Valid plan: decoded as-is (status and message come from the model).
- Anything else: a repair response with a single one-second "wait" step and
  status "error", so callers always have at least one actionable step.

JSON extraction is a greedy scan from the first "{" to the last "}". It
tolerates surrounding prose and code fences, but if the text holds two
separate brace-delimited blocks they are extracted together and the decode
fails into the repair response.

Example:
    >>> text = 'Sure! ```json {"configuration": [], "status": "success"} ```'
    >>> normalize(text).status
    'success'
    >>> normalize("I cannot help with that").configuration[0].type
    'wait'
"""

import json
import logging

from pydantic import ValidationError

from llm_rpa.exceptions import ResponseDecodeError
from llm_rpa.llm_runner.models import LLMRpaResponse, RpaActionConfig, SelectorInfo

logger = logging.getLogger(__name__)

# Pause used by the repair step, in milliseconds
REPAIR_WAIT_MS = "1000"


def extract_json_block(text: str) -> str | None:
    """
    Return the span from the first "{" to the last "}" in text.

    Args:
        text: Raw completion text

    Returns:
        str | None: The candidate JSON object text, or None if the text has
            no "{" ... "}" span.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def decode_plan(text: str) -> LLMRpaResponse:
    """
    Decode completion text into a plan, raising on any failure.

    Falls back to decoding the whole text when no brace span exists, so the
    error message describes what the model actually sent.

    Args:
        text: Raw completion text

    Returns:
        LLMRpaResponse: Decoded plan

    Raises:
        ResponseDecodeError: If the text is not valid JSON or does not match
            the plan schema
    """
    candidate = extract_json_block(text)
    if candidate is None:
        candidate = text

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ResponseDecodeError(f"Invalid JSON: {e}") from e

    try:
        return LLMRpaResponse.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(x) for x in err['loc']) or 'response'}: {err['msg']}"
            for err in e.errors()
        )
        raise ResponseDecodeError(f"Invalid plan structure: {problems}") from e


def repair_response(reason: str) -> LLMRpaResponse:
    """
    Build the fallback plan used when the model output cannot be decoded.

    Args:
        reason: Description of the decode failure

    Returns:
        LLMRpaResponse: One no-op wait step, status "error"
    """
    return LLMRpaResponse(
        configuration=[
            RpaActionConfig(
                name="Wait",
                action_type="default",
                type="wait",
                selector=SelectorInfo(type="none", value=None),
                value=REPAIR_WAIT_MS,
            )
        ],
        status="error",
        message=f"Failed to parse LLM response: {reason}",
    )


def normalize(text: str) -> LLMRpaResponse:
    """
    Convert raw completion text into a validated plan. Never raises.

    Args:
        text: Raw completion text from a provider

    Returns:
        LLMRpaResponse: The decoded plan, or a repair response
    """
    try:
        response = decode_plan(text)
    except ResponseDecodeError as e:
        logger.warning(f"Completion text could not be decoded, using repair plan: {e}")
        return repair_response(str(e))
    except Exception as e:
        logger.error(f"Unexpected error while decoding completion: {e}", exc_info=True)
        return repair_response(str(e))

    logger.debug(
        f"Decoded plan with {len(response.configuration)} steps "
        f"(status={response.status})"
    )
    return response
