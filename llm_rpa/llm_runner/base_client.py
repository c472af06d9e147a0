"""
Shared machinery for prompt-based provider adapters.

Anthropic, OpenAI and Together AI all follow the same cycle:

1. Render the prompt from the request (prompt_builder.build_prompt)
2. POST a provider-specific JSON body with provider-specific auth headers
3. Fail with ProviderHttpError on a non-2xx status
4. Pull the completion text out of the provider's response envelope
5. Hand the text to the response normalizer

Subclasses supply build_payload(), build_headers() and extract_text();
everything else lives here. The custom provider skips steps 1, 4 and 5 and
is implemented separately in custom_client.py.

Security:
    - API keys are only placed in request headers
    - API keys are NEVER logged, even in error messages
"""

import logging
from typing import Any

import httpx

from llm_rpa.exceptions import MalformedEnvelopeError, ProviderHttpError
from llm_rpa.extractor.normalizer import normalize
from llm_rpa.llm_runner.catalog import Provider, provider_display_name
from llm_rpa.llm_runner.models import LLMRpaRequest, LLMRpaResponse
from llm_rpa.llm_runner.prompt_builder import build_prompt
from llm_rpa.llm_runner.retry_config import create_retry_decorator

logger = logging.getLogger(__name__)


def read_error_body(response: httpx.Response) -> str | None:
    """
    Extract a readable error detail from a failed response.

    Prefers the provider's {"error": {"message": ...}} shape and falls
    back to the raw body text.

    Args:
        response: HTTP response with a non-2xx status

    Returns:
        str | None: Error detail, or None if the body is empty
    """
    try:
        data = response.json()
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    except ValueError:
        pass

    text = response.text.strip()
    return text or None


def error_label(provider: Provider) -> str:
    """Provider name used in error messages ("Custom API error: 500")."""
    return "Custom" if provider == "custom" else provider_display_name(provider)


async def post_json(
    http_client: httpx.AsyncClient,
    provider: Provider,
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str],
) -> httpx.Response:
    """
    POST a JSON body and fail with ProviderHttpError on a non-2xx status.

    Args:
        http_client: Shared async HTTP client
        provider: Provider identifier (for error messages)
        url: Endpoint URL
        payload: JSON body
        headers: Request headers (may contain secrets; never logged)

    Returns:
        httpx.Response: The successful response

    Raises:
        ProviderHttpError: On a non-2xx status
        httpx.TransportError: On connection failures and timeouts
    """
    response = await http_client.post(url, json=payload, headers=headers)

    if not response.is_success:
        body = read_error_body(response)
        label = error_label(provider)
        logger.error(
            f"{label} API HTTP error: status={response.status_code}, detail={body}"
        )
        raise ProviderHttpError(label, response.status_code, body)

    return response


def parse_envelope(response: httpx.Response, provider: Provider) -> dict[str, Any]:
    """
    Parse a provider response body as a JSON object.

    Raises:
        MalformedEnvelopeError: If the body is not a JSON object
    """
    try:
        data = response.json()
    except ValueError as e:
        raise MalformedEnvelopeError(
            f"{provider_display_name(provider)} response is not valid JSON: {e}"
        ) from e

    if not isinstance(data, dict):
        raise MalformedEnvelopeError(
            f"{provider_display_name(provider)} response is not a JSON object"
        )
    return data


class PromptClient:
    """
    Base class for adapters that send a rendered prompt and read back text.

    Attributes:
        provider: Provider identifier (set by subclasses)
        api_url: Chat/completion endpoint (set by subclasses)
        model_name: Model identifier sent to the provider
        api_key: Provider credential (NEVER logged)
        temperature: Sampling temperature
        max_tokens: Maximum output tokens
        max_attempts: Total attempts allowed by the retry policy
    """

    provider: Provider
    api_url: str

    def __init__(
        self,
        model_name: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        max_attempts: int = 1,
    ):
        """
        Initialize the adapter.

        Raises:
            ValueError: If model_name or api_key is empty
        """
        # Validate inputs (never log api_key)
        if not model_name or model_name.isspace():
            raise ValueError("model_name cannot be empty")

        if not api_key or api_key.isspace():
            raise ValueError("api_key cannot be empty")

        self.model_name = model_name
        self.api_key = api_key
        self.http_client = http_client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_attempts = max_attempts

        logger.debug(
            f"Initialized {provider_display_name(self.provider)} client "
            f"for model: {model_name}"
        )

    def build_payload(self, prompt: str) -> dict[str, Any]:
        """Return the provider-specific JSON request body."""
        raise NotImplementedError

    def build_headers(self) -> dict[str, str]:
        """Return the provider-specific auth headers."""
        raise NotImplementedError

    def extract_text(self, data: dict[str, Any]) -> str:
        """
        Return the completion text from the provider's response envelope.

        Raises:
            MalformedEnvelopeError: If the expected field is absent
        """
        raise NotImplementedError

    async def complete_text(self, prompt: str) -> str:
        """
        Send one prompt and return the raw completion text.

        Retries according to the retry policy (see retry_config).

        Raises:
            ProviderHttpError: On a non-2xx status
            MalformedEnvelopeError: If the completion text is missing
            httpx.TransportError: On network failures
        """
        payload = self.build_payload(prompt)
        headers = self.build_headers()

        # NEVER log headers
        logger.debug(
            f"Sending request to {provider_display_name(self.provider)}: "
            f"model={self.model_name}"
        )

        post = create_retry_decorator(self.max_attempts)(post_json)
        response = await post(
            self.http_client, self.provider, self.api_url, payload, headers
        )

        data = parse_envelope(response, self.provider)
        return self.extract_text(data)

    async def generate_plan(self, request: LLMRpaRequest) -> LLMRpaResponse:
        """
        Render the prompt, call the provider and normalize the completion.

        Args:
            request: Completion request

        Returns:
            LLMRpaResponse: Normalized plan (a repair plan if the model's
                text could not be decoded)
        """
        text = await self.complete_text(build_prompt(request))
        logger.debug(
            f"Received {len(text)} chars from {provider_display_name(self.provider)}"
        )
        return normalize(text)
