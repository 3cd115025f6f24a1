"""Timestamp helpers.

Timestamps are stored as ISO-8601 strings in UTC.
"""

from datetime import datetime, timedelta
from typing import Optional

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def now_iso() -> str:
    return utc_now().isoformat()


def iso_after(delta: timedelta) -> str:
    return (utc_now() + delta).isoformat()


def parse_iso(value: str) -> datetime:
    """Parse a stored ISO string. Naive values are treated as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def to_iso(value: datetime) -> str:
    """Normalize a datetime from a request body to a UTC ISO string."""
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).isoformat()


def is_expired(expires_at: Optional[str], now: Optional[datetime] = None) -> bool:
    """True when ``expires_at`` is set and lies in the past. NULL never expires."""
    if not expires_at:
        return False
    return (now or utc_now()) > parse_iso(expires_at)
