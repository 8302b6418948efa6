"""
Tests for ionos_watchdog/utils/time.py
"""

import pytest
from datetime import datetime, timedelta, timezone

from ionos_watchdog.utils.time import ensure_aware, parse_rfc3339, utcnow


class TestEnsureAware:

    def test_naive_assumed_utc(self):
        assert ensure_aware(datetime(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_aware_unchanged(self):
        cet = timezone(timedelta(hours=1))
        dt = datetime(2026, 1, 1, 12, tzinfo=cet)
        assert ensure_aware(dt) is dt

    def test_zulu_string(self):
        assert ensure_aware("2026-01-01T00:00:00Z") == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_offset_string(self):
        result = ensure_aware("2026-01-01T02:00:00+02:00")
        assert result == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_nanosecond_fraction(self):
        result = ensure_aware("2026-01-01T00:00:00.123456789Z")
        assert result == datetime(2026, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value,micro", [
        ("2026-01-01T00:00:00.5Z", 500000),
        ("2026-01-01T00:00:00.25+00:00", 250000),
        ("2026-01-01T00:00:00.1234Z", 123400),
    ])
    def test_short_fraction(self, value, micro):
        assert ensure_aware(value) == datetime(2026, 1, 1, 0, 0, 0, micro, tzinfo=timezone.utc)

    def test_bad_string_raises(self):
        with pytest.raises(ValueError):
            ensure_aware("not a date")


class TestParseRfc3339:

    def test_valid(self):
        assert parse_rfc3339("2026-03-10T10:00:00Z") == datetime(2026, 3, 10, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", None, "garbage", "2026-13-45T99:00:00Z"])
    def test_invalid_returns_none(self, value):
        assert parse_rfc3339(value) is None


def test_utcnow_is_aware():
    assert utcnow().tzinfo is not None
