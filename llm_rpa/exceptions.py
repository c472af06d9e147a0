"""
Custom exceptions for LLM RPA Planner.

All exceptions inherit from LLMRpaError so callers can catch every
application-specific failure with a single except clause.

Exception Hierarchy:
    LLMRpaError (base)
    ├── InstructionValidationError
    ├── InvalidTransitionError
    ├── ConfigurationError
    │   ├── CredentialMissingError
    │   └── EndpointNotConfiguredError
    └── LLMProviderError
        ├── ProviderHttpError
        ├── MalformedEnvelopeError
        └── ResponseDecodeError

Only InstructionValidationError (and InvalidTransitionError for the reserved
"completed" transition) ever reaches a caller of the orchestrator. The
provider errors are raised by the adapters and converted into error-status
responses by CompletionClient.complete().

Usage:
    from llm_rpa.exceptions import InstructionValidationError

    try:
        record_id = orchestrator.request_generation(text)
    except InstructionValidationError as e:
        console.print(f"[red]{e}[/red]")
"""


class LLMRpaError(Exception):
    """Base exception for all LLM RPA Planner errors."""

    pass


class InstructionValidationError(LLMRpaError):
    """
    Instruction text was rejected before any generation record was created.

    Example:
        raise InstructionValidationError("Please enter an instruction")
    """

    pass


class InvalidTransitionError(LLMRpaError):
    """
    A generation record cannot move to the requested status.

    Example:
        raise InvalidTransitionError("Record abc is 'generating', expected 'ready'")
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(LLMRpaError):
    """Base class for settings-related errors."""

    pass


class CredentialMissingError(ConfigurationError):
    """
    No usable credential is configured for the active provider.

    CompletionClient degrades to the mock response instead of surfacing this.

    Example:
        raise CredentialMissingError("No API key configured for provider 'openai'")
    """

    pass


class EndpointNotConfiguredError(ConfigurationError):
    """
    Custom provider is selected but its endpoint URL is blank.

    Example:
        raise EndpointNotConfiguredError("Custom endpoint not configured")
    """

    pass


# ============================================================================
# LLM Provider Errors
# ============================================================================


class LLMProviderError(LLMRpaError):
    """Base class for LLM provider API errors."""

    pass


class ProviderHttpError(LLMProviderError):
    """
    Provider responded with a non-2xx HTTP status.

    Attributes:
        status_code: HTTP status code returned by the provider
        body: Response body text, if it could be read

    Example:
        raise ProviderHttpError("Anthropic", 401, '{"error": ...}')
    """

    def __init__(self, provider: str, status_code: int, body: str | None = None):
        message = f"{provider} API error: {status_code}"
        if body:
            message += f" - {body}"
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body


class MalformedEnvelopeError(LLMProviderError):
    """
    Provider responded 2xx but the completion text was not where expected.

    Example:
        raise MalformedEnvelopeError("OpenAI response missing 'choices[0].message.content'")
    """

    pass


class ResponseDecodeError(LLMProviderError):
    """
    Model output did not contain a parseable action plan.

    The normalizer turns this into a repair response; it is exposed so the
    decode step can be exercised and logged on its own.

    Example:
        raise ResponseDecodeError("No JSON object found in completion text")
    """

    pass
