"""
Structured JSON logging for LLM RPA Planner.

Provides standardized logging with:
- JSON formatted output to stderr
- UTC timestamps
- Structured context fields (generation record id, provider, model)
- Secret redaction (never log API keys in full)

All modules log through Python's standard logging module via
``logging.getLogger(__name__)``; this module only configures handlers.
Log level defaults to INFO, use setup_logging(verbose=True) for DEBUG.

Examples:
    >>> from llm_rpa.utils.logging import setup_logging, log_with_context
    >>> setup_logging(verbose=True)
    >>> logger = logging.getLogger("llm_rpa.orchestrator")
    >>> log_with_context(logger, logging.INFO, "Generation ready",
    ...     context={"steps": 3}, record_id="4f1c...")

Security:
    - NEVER log full API keys
    - Only stderr is used (stdout reserved for user output)
"""

import json
import logging
import re
import sys
from typing import Any

from llm_rpa.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs each log record as a single JSON object.

    Fields:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level name
    - component: Logger name
    - message: Rendered log message
    - context: Structured data passed via extra={"context": {...}}
    - record_id: Generation record id passed via extra={"record_id": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if hasattr(record, "record_id"):
            log_entry["record_id"] = record.record_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class SecretRedactingFilter(logging.Filter):
    """
    Logging filter that redacts potential secrets from log messages.

    Replaces matched secrets with a redacted form that keeps the last 4 chars:
    "sk-ant-api03-abcdef123456..." -> "sk-...3456"
    "Bearer abc123xyz789..." -> "Bearer ***z789"
    """

    SECRET_PATTERNS = [
        (re.compile(r"\bsk-[a-zA-Z0-9_-]{20,}\b"), "sk-...{last4}"),
        (re.compile(r"\bBearer\s+[a-zA-Z0-9_-]{20,}\b"), "Bearer ***{last4}"),
        (re.compile(r"\b[a-zA-Z0-9_-]{32,}\b"), "***{last4}"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact_secrets(str(record.msg))

        if isinstance(record.args, dict):
            record.args = {k: self._redact_secrets(str(v)) for k, v in record.args.items()}
        elif record.args:
            record.args = tuple(self._redact_secrets(str(a)) for a in record.args)

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            record.context = self._redact_value(context)

        return True

    def _redact_secrets(self, text: str) -> str:
        for pattern, template in self.SECRET_PATTERNS:
            text = pattern.sub(
                lambda m, t=template: t.format(last4=m.group(0)[-4:]), text
            )
        return text

    def _redact_value(self, value: Any) -> Any:
        """Walk nested dicts and lists, redacting every string leaf."""
        if isinstance(value, str):
            return self._redact_secrets(value)
        if isinstance(value, dict):
            return {k: self._redact_value(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._redact_value(v) for v in value]
        return value


def setup_logging(verbose: bool = False, quiet_logs: bool = False) -> None:
    """
    Configure structured JSON logging for the application.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use INFO.
        quiet_logs: If True (and not verbose), only WARNING and above reach
            stderr. The CLI uses this in human mode so JSON log lines do not
            interleave with Rich output.

    Example:
        >>> setup_logging(verbose=True)
        >>> logging.getLogger("llm_rpa.cli").debug("Debug message")
    """
    if verbose:
        level = logging.DEBUG
    elif quiet_logs:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Prevent duplicate logs when called more than once (e.g. in tests)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(SecretRedactingFilter())

    root_logger.addHandler(handler)

    # HTTPX logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    record_id: str | None = None,
) -> None:
    """
    Log a message with structured context and optional generation record id.

    Equivalent to logger.log(level, message, extra={"context": ..., "record_id": ...}).

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.WARNING, etc.)
        message: Human-readable log message
        context: Optional dict with additional structured data
        record_id: Optional generation record identifier
    """
    extra = {}

    if context is not None:
        extra["context"] = context

    if record_id is not None:
        extra["record_id"] = record_id

    logger.log(level, message, extra=extra if extra else None)
