"""Built-in chat commands."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import redis

from relaybot import messages
from relaybot.services.quota import get_quota_usage
from relaybot.services.settings import get_user_settings, set_user_tone

ChatId = Union[int, str]
CommandHandler = Callable[[redis.Redis, ChatId, str, Mapping[str, Any]], str]

DEBUG_COMMAND = "/debug"


def parse_command(message_text: str) -> Tuple[str, str]:
    """Split ``message_text`` into a lower-cased command and its argument."""
    message_text = (message_text or "").strip()
    if not message_text:
        return "", ""

    split_message = message_text.split(None, 1)
    command = split_message[0].lower()
    # /help@SomeBot -> /help
    if command.startswith("/") and "@" in command:
        command = command.split("@", 1)[0]

    argument = split_message[1].strip() if len(split_message) > 1 else ""
    return command, argument


def get_help(
    redis_client: redis.Redis, chat_id: ChatId, argument: str, config: Mapping[str, Any]
) -> str:
    return messages.help_text(int(config.get("daily_quota") or 0))


def show_settings(
    redis_client: redis.Redis, chat_id: ChatId, argument: str, config: Mapping[str, Any]
) -> str:
    settings = get_user_settings(redis_client, chat_id)
    return messages.settings_text(settings["tone"])


def change_tone(
    redis_client: redis.Redis, chat_id: ChatId, argument: str, config: Mapping[str, Any]
) -> str:
    tone_arg = argument.split()[0] if argument else ""
    settings = set_user_tone(redis_client, chat_id, tone_arg)
    if settings is None:
        return messages.TONE_USAGE
    return messages.tone_updated_text(settings["tone"])


def show_quota(
    redis_client: redis.Redis, chat_id: ChatId, argument: str, config: Mapping[str, Any]
) -> str:
    used = get_quota_usage(redis_client, chat_id)
    return messages.quota_status_text(used, int(config.get("daily_quota") or 0))


def initialize_commands() -> Dict[str, CommandHandler]:
    """Commands answered directly, without quota or a completion call."""
    return {
        "/start": get_help,
        "/help": get_help,
        "/settings": show_settings,
        "/settings_tone": change_tone,
        "/quota": show_quota,
    }


def handle_command(
    redis_client: redis.Redis,
    chat_id: ChatId,
    message_text: str,
    config: Mapping[str, Any],
) -> Optional[str]:
    """Return the reply for a built-in command, or ``None`` to fall through."""

    command, argument = parse_command(message_text)
    handler = initialize_commands().get(command)
    if handler is None:
        return None
    return handler(redis_client, chat_id, argument, config)


def get_debug_prompt(message_text: str) -> Optional[str]:
    """Return the prompt of a ``/debug`` message, ``None`` for anything else."""

    text = (message_text or "").strip()
    if not text.lower().startswith(DEBUG_COMMAND):
        return None

    rest = text[len(DEBUG_COMMAND) :]
    # /debug@SomeBot hi -> hi
    if rest.startswith("@"):
        parts = rest.split(None, 1)
        rest = parts[1] if len(parts) > 1 else ""
    return rest.strip() or messages.DEBUG_DEFAULT_PROMPT
