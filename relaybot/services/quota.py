"""Per-chat daily message quota.

Counters live under ``quota:<chat_id>:<YYYY-MM-DD>`` and expire at the next
UTC midnight, so a new day starts from zero without any cleanup job.

The check and the increment are two separate Redis calls. Two requests from
the same chat racing each other can both read the same count and both be
admitted, so the cap is a soft limit under concurrency.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple, Union

import redis

from relaybot.services.redis_helpers import redis_get_int
from relaybot.utils import log_event, seconds_until_next_utc_midnight, utc_day_key

__all__ = [
    "QUOTA_KEY_PREFIX",
    "check_and_consume_quota",
    "get_quota_usage",
    "quota_key",
]


QUOTA_KEY_PREFIX = "quota:"


def quota_key(chat_id: Union[int, str], now: Optional[datetime] = None) -> str:
    return f"{QUOTA_KEY_PREFIX}{chat_id}:{utc_day_key(now)}"


def get_quota_usage(
    redis_client: redis.Redis, chat_id: Union[int, str], now: Optional[datetime] = None
) -> int:
    """Messages already consumed today by ``chat_id``."""

    count = redis_get_int(redis_client, quota_key(chat_id, now))
    return max(0, count or 0)


def check_and_consume_quota(
    redis_client: redis.Redis,
    chat_id: Union[int, str],
    daily_cap: int,
    now: Optional[datetime] = None,
) -> Tuple[bool, int]:
    """
    Consume one unit of today's quota for ``chat_id``.
    Returns ``(allowed, used_before)``; nothing is written when not allowed.
    """

    key = quota_key(chat_id, now)
    existing = get_quota_usage(redis_client, chat_id, now)

    if existing >= daily_cap:
        log_event(
            "quota",
            "Daily quota exceeded",
            {"chat_id": chat_id, "count": existing, "daily_cap": daily_cap},
        )
        return False, existing

    ttl = seconds_until_next_utc_midnight(now)
    redis_client.setex(key, ttl, str(existing + 1))
    return True, existing
