"""
Completion client: the single boundary between the orchestrator and providers.

CompletionClient.complete() turns an LLMRpaRequest into an LLMRpaResponse
and never raises (cancellation aside):

1. Read a snapshot of the active provider, model and credential.
2. No usable credential -> deterministic mock plan, no network I/O.
3. Otherwise dispatch to the provider adapter (build_client). Prompt adapters
   render a prompt, POST it and normalize the completion text; the custom
   adapter POSTs the request itself and decodes the plan directly.
4. Any exception raised on the way (HTTP status, network failure, timeout,
   malformed envelope, missing custom endpoint) becomes
   LLMRpaResponse(status="error", message="API call failed: <cause>").

Adapters may therefore assume the success path; the catch-all lives here.

Example:
    >>> settings = LLMSettings(InMemorySettingsStore())
    >>> async with CompletionClient(settings) as client:
    ...     response = await client.complete(request)
    >>> response.status
    'success'
"""

import logging

import httpx

from llm_rpa.config.settings import LLMSettings
from llm_rpa.exceptions import CredentialMissingError
from llm_rpa.llm_runner.catalog import models_for
from llm_rpa.llm_runner.mock_client import MockRpaClient
from llm_rpa.llm_runner.models import (
    LLMClient,
    LLMRpaRequest,
    LLMRpaResponse,
    build_client,
)
from llm_rpa.utils.logging import log_with_context

logger = logging.getLogger(__name__)


def error_response(message: str) -> LLMRpaResponse:
    """Build an empty error-status plan."""
    return LLMRpaResponse(configuration=[], status="error", message=message)


class CompletionClient:
    """
    Provider-agnostic completion entry point.

    Owns one shared httpx.AsyncClient (created on first use with the
    configured timeout) unless one is injected. Call aclose(), or use
    ``async with``, to release it.

    Attributes:
        settings: Settings source (read on every call)
    """

    def __init__(
        self,
        settings: LLMSettings,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.request_timeout
            )
        return self._http_client

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("Closed HTTP client")

    def resolve_client(self) -> LLMClient:
        """
        Build the adapter for the active provider.

        Returns:
            LLMClient: Provider adapter

        Raises:
            CredentialMissingError: If the active provider has no credential
        """
        data = self.settings.snapshot()
        provider = data.selected_provider

        api_key = self.settings.api_key(provider)
        if api_key is None:
            raise CredentialMissingError(
                f"No API key configured for provider '{provider}'"
            )

        model_id = data.selected_model_id
        if not model_id and provider != "custom":
            model_id = models_for(provider)[0].id

        return build_client(
            provider=provider,
            model_name=model_id or "custom",
            api_key=api_key,
            http_client=self.http_client,
            temperature=data.temperature,
            max_tokens=data.max_tokens,
            max_attempts=data.max_attempts,
            custom_endpoint=data.custom_endpoint,
        )

    async def complete(self, request: LLMRpaRequest) -> LLMRpaResponse:
        """
        Generate an action plan for a request. Never raises.

        asyncio.CancelledError is not an Exception subclass and propagates,
        so tearing down the orchestrator still cancels in-flight calls.

        Args:
            request: Completion request

        Returns:
            LLMRpaResponse: The plan, the mock plan, or an error-status plan
        """
        try:
            try:
                client = self.resolve_client()
            except CredentialMissingError as e:
                logger.debug(f"{e}; falling back to mock plan")
                client = MockRpaClient(provider=self.settings.selected_provider)

            log_with_context(
                logger,
                logging.INFO,
                "Requesting action plan",
                context={
                    "provider": client.provider,
                    "model": client.model_name,
                    "instructions": len(request.actions),
                },
            )
            response = await client.generate_plan(request)

        except Exception as e:
            # Never log request headers; adapters keep secrets out of messages
            cause = str(e) or type(e).__name__
            logger.error(f"Completion failed: {type(e).__name__}: {cause}")
            return error_response(f"API call failed: {cause}")

        log_with_context(
            logger,
            logging.INFO,
            "Action plan received",
            context={
                "status": response.status,
                "steps": len(response.configuration),
            },
        )
        return response
