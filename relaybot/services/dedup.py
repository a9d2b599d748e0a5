"""Skip Telegram updates that were already handled."""

from __future__ import annotations

from typing import Any

import redis

from relaybot.utils import log_event

__all__ = ["TTL_UPDATE_SEEN", "forget_update", "mark_update_seen"]


UPDATE_SEEN_PREFIX = "update:seen:"
TTL_UPDATE_SEEN = 24 * 60 * 60  # Telegram gives up redelivering well before this


def _update_key(update_id: int) -> str:
    return f"{UPDATE_SEEN_PREFIX}{update_id}"


def _valid_update_id(update_id: Any) -> bool:
    return isinstance(update_id, int) and not isinstance(update_id, bool)


def mark_update_seen(redis_client: redis.Redis, update_id: Any) -> bool:
    """Return ``False`` when ``update_id`` was seen before; unknown ids pass."""

    if not _valid_update_id(update_id):
        return True
    try:
        return bool(
            redis_client.set(_update_key(update_id), "1", nx=True, ex=TTL_UPDATE_SEEN)
        )
    except redis.RedisError as error:
        log_event("dedup", "Could not mark update", {"update_id": update_id, "error": str(error)})
        return True


def forget_update(redis_client: redis.Redis, update_id: Any) -> None:
    """Allow a redelivery of ``update_id`` after a failed attempt."""

    if not _valid_update_id(update_id):
        return
    try:
        redis_client.delete(_update_key(update_id))
    except redis.RedisError as error:
        log_event("dedup", "Could not forget update", {"update_id": update_id, "error": str(error)})
