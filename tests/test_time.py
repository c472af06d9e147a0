"""Tests for utils.time module."""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from llm_rpa.utils.time import format_relative, utc_now, utc_timestamp


class TestUtcNow:
    def test_timezone_aware(self):
        assert utc_now().tzinfo is not None

    @freeze_time("2025-11-02T08:30:45Z")
    def test_frozen(self):
        assert utc_now() == datetime(2025, 11, 2, 8, 30, 45, tzinfo=UTC)


class TestUtcTimestamp:
    @freeze_time("2025-11-02T08:30:45Z")
    def test_default_now(self):
        assert utc_timestamp() == "2025-11-02T08:30:45Z"

    def test_converts_to_utc(self):
        dt = datetime(2025, 11, 2, 10, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        assert utc_timestamp(dt) == "2025-11-02T08:00:00Z"

    def test_naive_rejected(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            utc_timestamp(datetime(2025, 11, 2, 8, 0, 0))


class TestFormatRelative:
    NOW = datetime(2025, 11, 2, 12, 0, 0, tzinfo=UTC)

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=0), "just now"),
            (timedelta(seconds=59), "just now"),
            (timedelta(minutes=1), "1m ago"),
            (timedelta(minutes=59), "59m ago"),
            (timedelta(hours=2), "2h ago"),
            (timedelta(days=3, hours=5), "3d ago"),
        ],
    )
    def test_buckets(self, delta, expected):
        assert format_relative(self.NOW - delta, self.NOW) == expected

    @freeze_time("2025-11-02T12:05:00Z")
    def test_default_now(self):
        assert format_relative(self.NOW) == "5m ago"
