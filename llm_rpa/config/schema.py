"""
Settings schema for LLM RPA Planner.

LLMSettingsData is the persisted settings document. Field names are
snake_case in Python and camelCase on disk (e.g. "selectedProvider",
"anthropicApiKey"), matching settings files written by earlier versions.

Numeric fields are clamped rather than rejected:
- temperature: [0.0, 2.0]
- max_tokens: [100, 32000]
- request_timeout: [1, 600] seconds
- max_attempts: [1, 5]

validate_assignment=True makes attribute assignment go through the same
validators, so every mutation is re-clamped.
"""

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from llm_rpa.config.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_ID,
    DEFAULT_TEMPERATURE,
    MAX_MAX_TOKENS,
    MAX_REQUEST_TIMEOUT,
    MAX_TEMPERATURE,
    MIN_MAX_TOKENS,
    MIN_REQUEST_TIMEOUT,
    MIN_TEMPERATURE,
)
from llm_rpa.llm_runner.catalog import DEFAULT_PROVIDER, PROVIDERS, Provider
from llm_rpa.llm_runner.retry_config import MAX_ATTEMPTS_LIMIT, REQUEST_TIMEOUT


class LLMSettingsData(BaseModel):
    """
    Persisted LLM settings.

    Attributes:
        selected_provider: Active provider
        selected_model_id: Active model id ("" when the custom provider is active)
        anthropic_api_key: Credential for Anthropic
        openai_api_key: Credential for OpenAI
        together_api_key: Credential for Together AI
        custom_api_key: Bearer token for the custom endpoint
        custom_endpoint: Custom endpoint URL
        max_tokens: Maximum output tokens
        temperature: Sampling temperature
        request_timeout: Per-attempt HTTP timeout in seconds
        max_attempts: Total HTTP attempts per generation
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    selected_provider: Provider = DEFAULT_PROVIDER
    selected_model_id: str = DEFAULT_MODEL_ID
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    together_api_key: str = ""
    custom_api_key: str = ""
    custom_endpoint: str = ""
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    request_timeout: float = REQUEST_TIMEOUT
    max_attempts: int = 1

    @field_validator("selected_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: object) -> str:
        """Accept any case ("ANTHROPIC"); unknown values fall back to the default."""
        if isinstance(v, str) and v.strip().lower() in PROVIDERS:
            return v.strip().lower()
        return DEFAULT_PROVIDER

    @field_validator("max_tokens")
    @classmethod
    def clamp_max_tokens(cls, v: int) -> int:
        return max(MIN_MAX_TOKENS, min(v, MAX_MAX_TOKENS))

    @field_validator("temperature")
    @classmethod
    def clamp_temperature(cls, v: float) -> float:
        return max(MIN_TEMPERATURE, min(v, MAX_TEMPERATURE))

    @field_validator("request_timeout")
    @classmethod
    def clamp_request_timeout(cls, v: float) -> float:
        return max(MIN_REQUEST_TIMEOUT, min(v, MAX_REQUEST_TIMEOUT))

    @field_validator("max_attempts")
    @classmethod
    def clamp_max_attempts(cls, v: int) -> int:
        return max(1, min(v, MAX_ATTEMPTS_LIMIT))

    def api_key_for(self, provider: Provider) -> str:
        """Return the raw (possibly blank) credential stored for a provider."""
        return getattr(self, f"{provider}_api_key", "")
