"""
UTC timestamp utilities for LLM RPA Planner.

All timestamps MUST be in UTC with explicit timezone markers.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix
- format_relative(): Short "time ago" label for history entries

Examples:
    >>> from llm_rpa.utils.time import utc_now, utc_timestamp
    >>> utc_now().tzinfo
    datetime.timezone.utc
    >>> utc_timestamp()
    '2025-11-02T08:30:45Z'
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Returns:
        datetime: Current UTC time with tzinfo=timezone.utc

    Note:
        NEVER use datetime.now() without timezone parameter.
        NEVER use datetime.utcnow() (deprecated, returns naive datetime).
    """
    return datetime.now(UTC)


def utc_timestamp(dt: datetime | None = None) -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ

    Args:
        dt: Optional timezone-aware datetime. If None, uses utc_now().

    Returns:
        str: ISO 8601 formatted timestamp in UTC

    Raises:
        ValueError: If dt is provided but is naive (missing timezone)
    """
    if dt is None:
        dt = utc_now()

    if dt.tzinfo is None:
        raise ValueError(
            "Datetime must be timezone-aware (use timezone.utc). "
            "Got naive datetime. Use utc_now() or ensure dt has tzinfo set."
        )

    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_relative(dt: datetime, now: datetime | None = None) -> str:
    """
    Format a timestamp as a compact age label.

    Buckets: under a minute is "just now", then minutes ("5m ago"),
    hours ("2h ago") and days ("3d ago").

    Args:
        dt: Timezone-aware datetime to describe
        now: Reference time. Defaults to utc_now().

    Returns:
        str: Human-readable relative age

    Examples:
        >>> from datetime import timedelta
        >>> now = utc_now()
        >>> format_relative(now - timedelta(seconds=30), now)
        'just now'
        >>> format_relative(now - timedelta(minutes=5), now)
        '5m ago'
    """
    if now is None:
        now = utc_now()

    seconds = int((now - dt).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
