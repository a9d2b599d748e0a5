"""Service layer: Redis-backed state and external integrations."""

from relaybot.services.redis_helpers import (
    redis_get_int,
    redis_get_json,
    redis_set_json,
)

__all__ = [
    "redis_get_int",
    "redis_get_json",
    "redis_set_json",
]
