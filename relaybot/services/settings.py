"""Per-chat response settings stored in Redis."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import redis

from relaybot.services.redis_helpers import redis_get_json, redis_set_json
from relaybot.utils import log_event

__all__ = [
    "DEFAULT_TONE",
    "SETTINGS_KEY_PREFIX",
    "VALID_TONES",
    "get_user_settings",
    "normalize_tone",
    "set_user_tone",
]


SETTINGS_KEY_PREFIX = "settings:"
DEFAULT_TONE = "friendly"
VALID_TONES = ("formal", "friendly", "technical")


def _settings_key(chat_id: Union[int, str]) -> str:
    return f"{SETTINGS_KEY_PREFIX}{chat_id}"


def normalize_tone(value: Any) -> Optional[str]:
    """Return the canonical tone name for ``value`` or ``None`` if unknown."""

    if not isinstance(value, str):
        return None
    tone = value.strip().lower()
    return tone if tone in VALID_TONES else None


def get_user_settings(redis_client: redis.Redis, chat_id: Union[int, str]) -> Dict[str, Any]:
    """Load settings for ``chat_id``, writing the defaults on first read."""

    stored = redis_get_json(redis_client, _settings_key(chat_id))
    if isinstance(stored, dict):
        tone = normalize_tone(stored.get("tone"))
        if tone:
            return {"tone": tone}

    settings = {"tone": DEFAULT_TONE}
    if stored is None:
        log_event("settings", "Creating default settings", {"chat_id": chat_id})
        redis_set_json(redis_client, _settings_key(chat_id), settings)
    return settings


def set_user_tone(
    redis_client: redis.Redis, chat_id: Union[int, str], tone: Any
) -> Optional[Dict[str, Any]]:
    """Overwrite the settings for ``chat_id``; ``None`` when ``tone`` is invalid."""

    normalized = normalize_tone(tone)
    if normalized is None:
        return None

    settings = {"tone": normalized}
    if not redis_set_json(redis_client, _settings_key(chat_id), settings):
        log_event(
            "settings",
            "Failed to store settings",
            {"chat_id": chat_id, "tone": normalized},
        )
    return settings
