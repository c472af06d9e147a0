"""
LLM runner module for LLM RPA Planner.

Provider catalog, wire models and provider adapters. Import the completion
entry point from its module:

    >>> from llm_rpa.llm_runner.completion_client import CompletionClient
"""

from llm_rpa.llm_runner.catalog import (
    PROVIDERS,
    LLMModel,
    Provider,
    find_model,
    models_for,
    provider_display_name,
)
from llm_rpa.llm_runner.models import (
    LLMAction,
    LLMClient,
    LLMRpaRequest,
    LLMRpaResponse,
    RpaActionConfig,
    SelectorInfo,
    build_client,
)

__all__ = [
    "PROVIDERS",
    "LLMAction",
    "LLMClient",
    "LLMModel",
    "LLMRpaRequest",
    "LLMRpaResponse",
    "Provider",
    "RpaActionConfig",
    "SelectorInfo",
    "build_client",
    "find_model",
    "models_for",
    "provider_display_name",
]
