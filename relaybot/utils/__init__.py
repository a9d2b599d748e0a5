"""Utility helpers for the relay bot."""

from relaybot.utils.logs import log_event
from relaybot.utils.timing import now_utc, seconds_until_next_utc_midnight, utc_day_key

__all__ = [
    "log_event",
    "now_utc",
    "seconds_until_next_utc_midnight",
    "utc_day_key",
]
