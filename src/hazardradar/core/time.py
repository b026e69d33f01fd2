"""
Timestamps.

Report submission times are always timezone-aware. Naive values (seed files, CSV
imports) are read as wall-clock time in the configured `app.timezone`.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=ZoneInfo(timezone))


def now(timezone: str) -> datetime:
    return datetime.now(ZoneInfo(timezone))


def parse_datetime(value: str, timezone: str) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing `Z` means UTC)."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return ensure_tz(datetime.fromisoformat(text), timezone)
