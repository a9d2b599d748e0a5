"""Application-wide configuration helpers."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import redis

from relaybot.utils import log_event


DEFAULT_WEBHOOK_PATH = "/webhook"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_VOICE_MODEL = "gpt-4o-mini-tts"
DEFAULT_VOICE = "alloy"
DEFAULT_MAX_OUTPUT_TOKENS = 1024
DEFAULT_OPENAI_TIMEOUT = 60
DEFAULT_DAILY_QUOTA = 20
DEFAULT_BACKOFF_SECONDS = 3600  # 1 hour


_bot_config: Optional[Dict[str, Any]] = None


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not str(raw).strip():
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def load_bot_config() -> Dict[str, Any]:
    """Load bot configuration from environment variables."""

    global _bot_config

    if _bot_config is not None:
        return _bot_config

    webhook_path = (os.environ.get("WEBHOOK_PATH") or DEFAULT_WEBHOOK_PATH).strip()
    if not webhook_path.startswith("/"):
        webhook_path = "/" + webhook_path

    _bot_config = {
        "telegram_token": os.environ.get("TELEGRAM_TOKEN") or None,
        "webhook_secret": os.environ.get("WEBHOOK_SECRET") or None,
        "webhook_path": webhook_path,
        "openai_api_key": os.environ.get("OPENAI_API_KEY") or None,
        "openai_model": os.environ.get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        "voice_model": os.environ.get("OPENAI_VOICE_MODEL") or DEFAULT_VOICE_MODEL,
        "voice": os.environ.get("OPENAI_VOICE") or DEFAULT_VOICE,
        "max_output_tokens": _env_int(
            "OPENAI_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS, minimum=1
        ),
        "openai_timeout": _env_int("OPENAI_TIMEOUT", DEFAULT_OPENAI_TIMEOUT, minimum=1),
        "daily_quota": _env_int("DAILY_QUOTA", DEFAULT_DAILY_QUOTA),
        "backoff_seconds": _env_int(
            "OPENAI_BACKOFF_SECONDS", DEFAULT_BACKOFF_SECONDS, minimum=1
        ),
        "voice_replies": _env_bool("VOICE_REPLIES", True),
        "admin_chat_id": os.environ.get("ADMIN_CHAT_ID") or None,
    }

    return _bot_config


def config_redis(host=None, port=None, password=None):
    try:
        host = host or os.environ.get("REDIS_HOST", "localhost")
        port = int(port or os.environ.get("REDIS_PORT", 6379))
        password = password or os.environ.get("REDIS_PASSWORD", None)
        redis_client = redis.Redis(
            host=host, port=port, password=password, decode_responses=True
        )
        redis_client.ping()
        return redis_client
    except Exception as exc:
        error_context = {
            "host": host,
            "port": port,
            "password": "***" if password else None,
        }
        log_event("redis", f"Redis connection error: {exc}", error_context)
        raise


def reset_cache() -> None:
    """Clear cached configuration (used primarily in tests)."""

    global _bot_config
    _bot_config = None


def set_cache(config: Optional[Dict[str, Any]]) -> None:
    """Override cached configuration (test helper)."""

    global _bot_config
    _bot_config = config


__all__ = [
    "config_redis",
    "load_bot_config",
    "reset_cache",
    "set_cache",
]
