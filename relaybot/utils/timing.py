"""UTC calendar helpers shared by the quota and backoff services."""

from datetime import datetime, timedelta, timezone
from typing import Optional
import math

__all__ = [
    "now_utc",
    "seconds_until_next_utc_midnight",
    "utc_day_key",
]


def now_utc() -> datetime:
    """Return the current time as an aware UTC ``datetime``."""
    return datetime.now(timezone.utc)


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return now_utc()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def utc_day_key(now: Optional[datetime] = None) -> str:
    """Return the UTC calendar day as ``YYYY-MM-DD``."""
    return _as_utc(now).strftime("%Y-%m-%d")


def seconds_until_next_utc_midnight(now: Optional[datetime] = None) -> int:
    """Seconds left in the current UTC day, never less than one."""
    current = _as_utc(now)
    tomorrow = datetime(
        current.year, current.month, current.day, tzinfo=timezone.utc
    ) + timedelta(days=1)
    remaining = (tomorrow - current).total_seconds()
    return max(1, math.ceil(remaining))
