"""Text-to-speech for voice replies."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from openai import OpenAI

from relaybot.config import load_bot_config
from relaybot.services.completion import build_openai_client

__all__ = ["VOICE_FORMAT", "synthesize_voice"]


VOICE_FORMAT = "opus"


def synthesize_voice(
    text: str,
    *,
    client: Optional[OpenAI] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> bytes:
    """Return opus audio for ``text``. Raises on empty input or API errors."""

    trimmed_text = (text or "").strip()
    if not trimmed_text:
        raise ValueError("Cannot synthesize empty text")

    config = config or load_bot_config()
    client = client or build_openai_client(config)
    response = client.audio.speech.create(
        model=str(config.get("voice_model")),
        voice=str(config.get("voice")),
        input=trimmed_text,
        response_format=VOICE_FORMAT,
    )
    return response.content
