"""
Custom endpoint adapter for LLM RPA Planner.

The custom provider is a user-run service that already speaks the plan
format: the request is POSTed as JSON (wire field names, e.g. "sourceUrl")
and the response body must be an LLMRpaResponse. There is no prompt
templating and no text extraction, so this adapter does not share
PromptClient.

Example:
    >>> client = CustomClient("https://rpa.internal/generate", "token", http_client)
    >>> plan = await client.generate_plan(request)
"""

import logging

import httpx
from pydantic import ValidationError

from llm_rpa.exceptions import EndpointNotConfiguredError, MalformedEnvelopeError
from llm_rpa.llm_runner.base_client import parse_envelope, post_json
from llm_rpa.llm_runner.models import LLMRpaRequest, LLMRpaResponse
from llm_rpa.llm_runner.retry_config import create_retry_decorator

logger = logging.getLogger(__name__)


class CustomClient:
    """
    Adapter for a user-configured plan endpoint.

    Attributes:
        endpoint: Endpoint URL (may be blank; checked on each call)
        api_key: Bearer token (NEVER logged)
        max_attempts: Total attempts allowed by the retry policy
    """

    provider = "custom"
    model_name = "custom"

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        max_attempts: int = 1,
    ):
        self.endpoint = endpoint.strip()
        self.api_key = api_key
        self.http_client = http_client
        self.max_attempts = max_attempts

    async def generate_plan(self, request: LLMRpaRequest) -> LLMRpaResponse:
        """
        POST the request to the custom endpoint and decode its plan.

        Raises:
            EndpointNotConfiguredError: If no endpoint is configured (no I/O)
            ProviderHttpError: On a non-2xx status
            MalformedEnvelopeError: If the body is not a valid plan
        """
        if not self.endpoint:
            raise EndpointNotConfiguredError("Custom endpoint not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        # Query strings may carry tokens
        endpoint = httpx.URL(self.endpoint)
        logger.debug(
            f"Sending request to custom endpoint {endpoint.scheme}://{endpoint.host}"
        )

        post = create_retry_decorator(self.max_attempts)(post_json)
        response = await post(
            self.http_client, self.provider, self.endpoint, request.to_wire(), headers
        )

        data = parse_envelope(response, self.provider)
        try:
            return LLMRpaResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedEnvelopeError(
                f"Custom API response is not a valid plan: {e.error_count()} validation errors"
            ) from e
