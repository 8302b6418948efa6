"""
Timezone helpers

Every datetime compared inside the watchdog is UTC-aware. Feed timestamps
arrive as RFC 3339 strings and Kubernetes event times may be naive, so both
pass through here before any window comparison.
"""

import re
from datetime import datetime, timezone
from typing import Optional, Union

# Older fromisoformat only takes 3 or 6 fraction digits
_FRACTION = re.compile(r"\.(\d+)")


def _six_digit_fraction(match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def ensure_aware(value: Union[datetime, str]) -> datetime:
    """
    Return value as a UTC-aware datetime.

    Naive datetimes are taken to be UTC. Strings are parsed as ISO 8601 /
    RFC 3339; a trailing "Z" and fractions of any length are accepted.

    Raises:
        ValueError: if a string cannot be parsed

    Examples:
        >>> ensure_aware("2026-01-01T00:00:00Z")
        datetime.datetime(2026, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(_FRACTION.sub(_six_digit_fraction, text))

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_rfc3339(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp string; None if it is empty or malformed."""
    if not value:
        return None
    try:
        return ensure_aware(value)
    except ValueError:
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
