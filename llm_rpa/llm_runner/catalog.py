"""
Static catalog of supported LLM providers and their models.

Pure data plus lookup: no I/O and no failure modes. The "custom" provider
has no catalog entries; it talks to a user-configured endpoint instead.

Example:
    >>> from llm_rpa.llm_runner.catalog import models_for, find_model
    >>> [m.id for m in models_for("openai")][:2]
    ['gpt-4o', 'gpt-4o-mini']
    >>> find_model("claude-3-5-haiku-20241022").context_window
    200000
    >>> models_for("custom")
    []
"""

from dataclasses import dataclass
from typing import Literal, get_args

Provider = Literal["anthropic", "openai", "together", "custom"]

# Declaration order is the order shown to users
PROVIDERS: tuple[Provider, ...] = get_args(Provider)

DEFAULT_PROVIDER: Provider = "anthropic"

_DISPLAY_NAMES: dict[str, str] = {
    "anthropic": "Anthropic",
    "openai": "OpenAI",
    "together": "Together AI",
    "custom": "Custom API",
}


@dataclass(frozen=True)
class LLMModel:
    """
    A model offered by one provider.

    Attributes:
        id: Identifier sent to the provider API (e.g., "gpt-4o-mini")
        name: Human-readable name (e.g., "GPT-4o Mini")
        provider: Owning provider
        context_window: Context window size in tokens
    """

    id: str
    name: str
    provider: Provider
    context_window: int = 4096


ANTHROPIC_MODELS: tuple[LLMModel, ...] = (
    LLMModel("claude-opus-4-20250514", "Claude Opus 4", "anthropic", 200000),
    LLMModel("claude-sonnet-4-20250514", "Claude Sonnet 4", "anthropic", 200000),
    LLMModel("claude-3-7-sonnet-20250219", "Claude 3.7 Sonnet", "anthropic", 200000),
    LLMModel("claude-3-5-sonnet-20240620", "Claude 3.5 Sonnet", "anthropic", 200000),
    LLMModel("claude-3-5-haiku-20241022", "Claude 3.5 Haiku", "anthropic", 200000),
)

OPENAI_MODELS: tuple[LLMModel, ...] = (
    LLMModel("gpt-4o", "GPT-4o", "openai", 128000),
    LLMModel("gpt-4o-mini", "GPT-4o Mini", "openai", 128000),
    LLMModel("gpt-4-turbo", "GPT-4 Turbo", "openai", 128000),
    LLMModel("gpt-3.5-turbo", "GPT-3.5 Turbo", "openai", 16000),
)

TOGETHER_MODELS: tuple[LLMModel, ...] = (
    LLMModel(
        "meta-llama/Meta-Llama-3.1-405B-Instruct-Turbo",
        "Llama 3.1 405B",
        "together",
        128000,
    ),
    LLMModel(
        "meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
        "Llama 3.1 70B",
        "together",
        128000,
    ),
    LLMModel(
        "mistralai/Mixtral-8x22B-Instruct-v0.1",
        "Mixtral 8x22B",
        "together",
        65536,
    ),
)

_CATALOG: dict[str, tuple[LLMModel, ...]] = {
    "anthropic": ANTHROPIC_MODELS,
    "openai": OPENAI_MODELS,
    "together": TOGETHER_MODELS,
    "custom": (),
}


def models_for(provider: Provider) -> list[LLMModel]:
    """
    Return the ordered model catalog for a provider.

    Args:
        provider: Provider identifier

    Returns:
        list[LLMModel]: Models in display order; empty for "custom"
            and for unknown provider strings.
    """
    return list(_CATALOG.get(provider, ()))


def find_model(model_id: str) -> LLMModel | None:
    """
    Look up a model by id across every non-custom provider.

    Args:
        model_id: Model identifier (e.g., "gpt-4o")

    Returns:
        LLMModel if found, None otherwise
    """
    for provider in PROVIDERS:
        for model in _CATALOG[provider]:
            if model.id == model_id:
                return model
    return None


def provider_display_name(provider: Provider) -> str:
    """Return the human-readable name for a provider."""
    return _DISPLAY_NAMES.get(provider, provider)
