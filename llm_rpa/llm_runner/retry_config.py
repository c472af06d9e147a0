"""
Retry configuration for LLM API calls.

Centralized retry policy using tenacity for exponential backoff. Used by
every provider adapter so retry behavior is identical across providers.

The attempt budget comes from settings (max_attempts, default 1). With the
default each generation performs exactly one POST; users on flaky networks
can raise it to retry transient failures.

Retryable:
- ProviderHttpError with status 429 or 5xx
- httpx.TransportError (connect errors, timeouts, dropped connections)

Never retried:
- Any other ProviderHttpError (401, 400, 404, ...)
- MalformedEnvelopeError / EndpointNotConfiguredError

Example:
    >>> from llm_rpa.llm_runner.retry_config import create_retry_decorator
    >>> post = create_retry_decorator(max_attempts=3)(client._post)
    >>> data = await post(payload)
"""

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from llm_rpa.exceptions import ProviderHttpError

# Minimum wait time between retries (seconds)
MIN_WAIT_SECONDS = 1

# Caps exponential backoff
MAX_WAIT_SECONDS = 30

# Upper bound accepted by settings
MAX_ATTEMPTS_LIMIT = 5

# 429: Rate limit exceeded (temporary)
# 500-504: Server errors (temporary, might recover)
RETRY_STATUS_CODES = frozenset([429, 500, 502, 503, 504])

# HTTP request timeout in seconds (per attempt)
REQUEST_TIMEOUT = 30.0


def is_retryable(exc: BaseException) -> bool:
    """
    Decide whether an exception raised by an adapter should be retried.

    Args:
        exc: Exception raised by the wrapped call

    Returns:
        True for transient HTTP statuses and transport failures
    """
    if isinstance(exc, ProviderHttpError):
        return exc.status_code in RETRY_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def create_retry_decorator(max_attempts: int = 1):
    """
    Create a tenacity retry decorator for LLM API calls.

    Args:
        max_attempts: Total attempts including the first one. Values outside
            [1, MAX_ATTEMPTS_LIMIT] are clamped.

    Returns:
        Retry decorator that works on both sync and async callables

    Note:
        reraise=True surfaces the last original exception rather than
        tenacity.RetryError, so callers see ProviderHttpError / httpx errors.
    """
    attempts = max(1, min(max_attempts, MAX_ATTEMPTS_LIMIT))

    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(
            multiplier=1,
            min=MIN_WAIT_SECONDS,
            max=MAX_WAIT_SECONDS,
        ),
        retry=retry_if_exception(is_retryable),
        reraise=True,
    )
