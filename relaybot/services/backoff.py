"""Store-wide backoff gate for the completion provider.

When OpenAI reports that the shared credential ran out of quota, every chat
stops calling it until ``openai:quota:block-until`` is in the past. The key
carries its own TTL so a block can never outlive its cooldown by much even
if nobody reads it again.
"""

from __future__ import annotations

import math
import time
from typing import Optional, Tuple

import redis

from relaybot.services.redis_helpers import redis_get_int
from relaybot.utils import log_event

__all__ = [
    "BACKOFF_KEY",
    "BACKOFF_TTL_MARGIN",
    "get_backoff_remaining",
    "is_completion_blocked",
    "trip_completion_backoff",
]


BACKOFF_KEY = "openai:quota:block-until"
BACKOFF_TTL_MARGIN = 3600  # key outlives the cooldown by 1 hour at most


def get_backoff_remaining(redis_client: redis.Redis, now: Optional[float] = None) -> float:
    """Return seconds remaining on the backoff window (0 when inactive)."""

    current = time.time() if now is None else now
    try:
        block_until = redis_get_int(redis_client, BACKOFF_KEY)
    except redis.RedisError as error:
        log_event("backoff", "Could not read backoff state", {"error": str(error)})
        return 0.0
    if block_until is None:
        return 0.0
    return max(0.0, block_until - current)


def is_completion_blocked(
    redis_client: redis.Redis, now: Optional[float] = None
) -> Tuple[bool, int]:
    """Return ``(blocked, minutes_left)`` with minutes rounded up."""

    remaining = get_backoff_remaining(redis_client, now)
    if remaining <= 0:
        return False, 0
    return True, max(1, math.ceil(remaining / 60))


def trip_completion_backoff(
    redis_client: redis.Redis, cooldown_seconds: int, now: Optional[float] = None
) -> int:
    """Block completion calls for ``cooldown_seconds``; returns the new deadline."""

    current = time.time() if now is None else now
    cooldown = max(1, int(cooldown_seconds))
    block_until = int(math.ceil(current + cooldown))
    try:
        redis_client.setex(BACKOFF_KEY, cooldown + BACKOFF_TTL_MARGIN, str(block_until))
    except redis.RedisError as error:
        log_event("backoff", "Could not store backoff state", {"error": str(error)})
        return block_until
    log_event(
        "backoff",
        "Completion backoff activated",
        {"block_until": block_until, "cooldown_seconds": cooldown},
    )
    return block_until
