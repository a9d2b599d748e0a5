"""Telegram Bot API delivery helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import requests

from relaybot.config import load_bot_config
from relaybot.utils import log_event

__all__ = [
    "TELEGRAM_CHUNK_SIZE",
    "send_msg",
    "send_text",
    "send_voice",
    "split_text_chunks",
]


TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/{method}"
TELEGRAM_CHUNK_SIZE = 4000  # Telegram rejects messages over 4096 chars
TELEGRAM_TIMEOUT = 10


def _method_url(method: str) -> str:
    token = load_bot_config().get("telegram_token")
    return TELEGRAM_API_URL.format(token=token, method=method)


def split_text_chunks(text: str, size: int = TELEGRAM_CHUNK_SIZE) -> List[str]:
    """Split ``text`` into ordered pieces of at most ``size`` characters."""

    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [text[i : i + size] for i in range(0, len(text or ""), size)]


def send_msg(chat_id: Union[int, str], msg: str) -> bool:
    """Send one ``sendMessage`` call; returns whether Telegram accepted it."""

    payload: Dict[str, Any] = {"chat_id": chat_id, "text": msg}
    try:
        response = requests.post(
            _method_url("sendMessage"), json=payload, timeout=TELEGRAM_TIMEOUT
        )
    except requests.RequestException as error:
        log_event(
            "telegram",
            "sendMessage failed",
            {"chat_id": chat_id, "error": str(error)},
        )
        return False

    if not response.ok:
        log_event(
            "telegram",
            "sendMessage failed",
            {"chat_id": chat_id, "status": response.status_code, "body": response.text},
        )
        return False
    return True


def send_text(
    chat_id: Union[int, str], text: str, chunk_size: int = TELEGRAM_CHUNK_SIZE
) -> List[bool]:
    """Deliver ``text`` in chunks, continuing past failed chunks."""

    return [send_msg(chat_id, chunk) for chunk in split_text_chunks(text, chunk_size)]


def send_voice(
    chat_id: Union[int, str], audio: bytes, caption: Optional[str] = None
) -> bool:
    """Upload ``audio`` as a voice note. Failures are logged, never raised."""

    data: Dict[str, Any] = {"chat_id": str(chat_id)}
    if caption:
        data["caption"] = caption
    files = {"voice": ("response.ogg", audio, "audio/ogg")}

    try:
        response = requests.post(
            _method_url("sendVoice"), data=data, files=files, timeout=TELEGRAM_TIMEOUT
        )
    except requests.RequestException as error:
        log_event(
            "telegram",
            "sendVoice failed",
            {"chat_id": chat_id, "error": str(error)},
        )
        return False

    if not response.ok:
        log_event(
            "telegram",
            "sendVoice failed",
            {"chat_id": chat_id, "status": response.status_code, "body": response.text},
        )
        return False
    return True
