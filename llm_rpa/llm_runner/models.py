"""
Wire types, client protocol and client factory for LLM RPA Planner.

Key components:
- LLMAction: One natural-language instruction
- LLMRpaRequest: Batch of instructions plus the target page URL
- SelectorInfo / RpaActionConfig: One generated browser-automation step
- LLMRpaResponse: Ordered action plan with status and message
- LLMClient: Protocol every provider adapter satisfies
- build_client: Factory returning the adapter for a provider

Wire types are pydantic models so that decoding a model's JSON output is
also its validation. Unknown keys are ignored, matching the lenient
decoding LLM output needs.

Example:
    >>> request = LLMRpaRequest(
    ...     actions=[LLMAction(instruction="Click search")],
    ...     source_url="https://example.com",
    ... )
    >>> client = build_client("openai", "gpt-4o-mini", "sk-...", http_client)
    >>> response = await client.generate_plan(request)
    >>> [step.type for step in response.configuration]
    ['click']
"""

from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from llm_rpa.llm_runner.catalog import Provider

# Known action vocabulary. The "type" field stays a free string: models
# occasionally invent types and the plan is still worth showing.
ACTION_TYPES: tuple[str, ...] = (
    "navigate",
    "click",
    "input",
    "wait",
    "scroll",
    "screenshot",
    "extract",
    "select",
    "hover",
    "rightClick",
    "keypress",
    "submit",
)

SELECTOR_TYPES: tuple[str, ...] = ("css", "xpath", "id", "text", "none")


def _scalar_to_str(v: Any) -> Any:
    """Accept bare numbers/booleans where the wire format expects a string."""
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, int | float):
        return str(v)
    return v


class LLMAction(BaseModel):
    """
    One natural-language instruction.

    Attributes:
        instruction: Free-form instruction text (e.g., "Click search")
        action_type: Optional free-form tag, serialized as "actionType"
        meta: Optional string key/value metadata
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    instruction: str
    action_type: str = Field(default="default", alias="actionType")
    meta: dict[str, str] | None = None


class SelectorInfo(BaseModel):
    """
    How a step locates its target element.

    Attributes:
        type: Selector kind (css, xpath, id, text, none)
        value: Selector expression, or None for kind "none"
        is_unique: Whether the selector matches exactly one element,
            serialized as "isUnique"
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str
    value: str | None
    is_unique: bool = Field(default=True, alias="isUnique")


class RpaActionConfig(BaseModel):
    """
    One browser-automation step.

    Attributes:
        name: Human-readable description of the step
        action_type: Free-form tag carried through from the instruction
        type: Action kind (see ACTION_TYPES)
        selector: Target element
        value: Optional payload (text to type, key to press, wait millis)
        meta: Optional string key/value metadata
    """

    name: str
    action_type: str = "default"
    type: str
    selector: SelectorInfo
    value: str | None = None
    meta: dict[str, str] | None = None

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> Any:
        """Models often emit wait durations as bare numbers."""
        return _scalar_to_str(v)

    @field_validator("meta", mode="before")
    @classmethod
    def coerce_meta(cls, v: Any) -> Any:
        """Stringify scalar metadata values."""
        if isinstance(v, dict):
            return {str(k): _scalar_to_str(val) for k, val in v.items()}
        return v


class LLMRpaRequest(BaseModel):
    """
    Immutable completion request.

    Attributes:
        actions: Ordered instructions batched into one request
        source_url: Page the automation targets, serialized as "sourceUrl"
        configuration: Optional prior plan for iterative refinement
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    actions: list[LLMAction]
    source_url: str = Field(alias="sourceUrl")
    configuration: list[RpaActionConfig] | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LLMRpaResponse(BaseModel):
    """
    Action plan returned for a request.

    Attributes:
        configuration: Ordered action steps
        status: "success" or "error"
        message: Optional human-readable explanation
    """

    configuration: list[RpaActionConfig]
    status: str
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"


class LLMClient(Protocol):
    """
    Provider-agnostic interface for completion adapters.

    Implementations perform exactly one logical request (plus any retries
    allowed by their retry policy) and return a typed plan. Unlike
    CompletionClient.complete(), adapters are allowed to raise:

    - ProviderHttpError on non-2xx responses
    - MalformedEnvelopeError when the completion text is missing
    - EndpointNotConfiguredError (custom provider only)
    - httpx transport errors on network failure

    Implementations MUST never log API keys.
    """

    provider: Provider
    model_name: str

    async def generate_plan(self, request: LLMRpaRequest) -> LLMRpaResponse:
        """Send the request to the provider and return the decoded plan."""
        ...


def build_client(
    provider: Provider,
    model_name: str,
    api_key: str,
    http_client: httpx.AsyncClient,
    temperature: float = 0.7,
    max_tokens: int = 4096,
    max_attempts: int = 1,
    custom_endpoint: str = "",
) -> LLMClient:
    """
    Factory function to create the adapter for a provider.

    Supported providers:
    - "anthropic": Anthropic Messages API
    - "openai": OpenAI Chat Completions API
    - "together": Together AI (OpenAI-compatible Chat Completions)
    - "custom": User-configured endpoint that speaks the plan format natively

    Args:
        provider: Provider identifier
        model_name: Model identifier (ignored by the custom provider)
        api_key: Credential for the provider (NEVER logged)
        http_client: Shared async HTTP client
        temperature: Sampling temperature
        max_tokens: Maximum output tokens
        max_attempts: Total attempts allowed by the retry policy
        custom_endpoint: Endpoint URL for the custom provider

    Returns:
        LLMClient: Provider-specific adapter

    Raises:
        ValueError: If provider is not supported
    """
    if provider == "anthropic":
        # Import here to avoid circular dependencies and keep imports lazy
        from llm_rpa.llm_runner.anthropic_client import AnthropicClient

        return AnthropicClient(
            model_name=model_name,
            api_key=api_key,
            http_client=http_client,
            temperature=temperature,
            max_tokens=max_tokens,
            max_attempts=max_attempts,
        )

    if provider == "openai":
        from llm_rpa.llm_runner.openai_client import OpenAIClient

        return OpenAIClient(
            model_name=model_name,
            api_key=api_key,
            http_client=http_client,
            temperature=temperature,
            max_tokens=max_tokens,
            max_attempts=max_attempts,
        )

    if provider == "together":
        from llm_rpa.llm_runner.openai_client import TogetherClient

        return TogetherClient(
            model_name=model_name,
            api_key=api_key,
            http_client=http_client,
            temperature=temperature,
            max_tokens=max_tokens,
            max_attempts=max_attempts,
        )

    if provider == "custom":
        from llm_rpa.llm_runner.custom_client import CustomClient

        return CustomClient(
            endpoint=custom_endpoint,
            api_key=api_key,
            http_client=http_client,
            max_attempts=max_attempts,
        )

    raise ValueError(
        f"Unsupported provider: '{provider}'. "
        f"Supported providers: anthropic, openai, together, custom"
    )
