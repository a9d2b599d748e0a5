from flask import Flask, Request, request
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import hmac
import json
import traceback

import redis

from relaybot import messages
from relaybot.commands import get_debug_prompt, handle_command
from relaybot.config import config_redis, load_bot_config
from relaybot.services.backoff import is_completion_blocked, trip_completion_backoff
from relaybot.services.completion import (
    OUTCOME_OK,
    OUTCOME_QUOTA_EXHAUSTED,
    complete,
)
from relaybot.services.dedup import forget_update, mark_update_seen
from relaybot.services.quota import check_and_consume_quota
from relaybot.services.settings import get_user_settings
from relaybot.services.telegram import send_msg, send_text, send_voice
from relaybot.services.voice import synthesize_voice
from relaybot.utils import log_event


SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"
ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def admin_report(
    message: str,
    error: Optional[Exception] = None,
    extra_context: Optional[Dict] = None,
) -> None:
    """Admin reporting with optional error details and extra context"""
    admin_chat_id = load_bot_config().get("admin_chat_id")

    formatted_message = f"Admin report: {message}"

    if extra_context:
        context_details = "\n\nAdditional Context:"
        for key, value in extra_context.items():
            context_details += f"\n{key}: {value}"
        formatted_message += context_details

    if error:
        error_details = f"\n\nError Type: {type(error).__name__}"
        error_details += f"\nError Message: {str(error)}"

        error_details += f"\n\nTraceback:\n{traceback.format_exc()}"

        formatted_message += error_details

    if admin_chat_id:
        send_text(admin_chat_id, formatted_message)


def extract_chat_update(update: Any) -> Optional[Tuple[int, str]]:
    """Return ``(chat_id, text)`` from a Telegram update or ``None``."""

    if not isinstance(update, dict):
        return None
    message = update.get("message")
    if not isinstance(message, dict):
        return None
    chat = message.get("chat")
    chat_id = chat.get("id") if isinstance(chat, dict) else None
    text = message.get("text")

    if isinstance(chat_id, bool) or not isinstance(chat_id, int) or not chat_id:
        return None
    if not isinstance(text, str):
        return None
    return chat_id, text


def deliver_answer(
    chat_id: Union[int, str], answer: str, outcome: str, config: Mapping[str, Any]
) -> None:
    """Send the answer as text and, when enabled, as a voice note."""

    with_voice = bool(config.get("voice_replies")) and outcome == OUTCOME_OK
    if not with_voice:
        send_text(chat_id, answer)
        return

    send_text(chat_id, f"{answer}\n\n{messages.AI_DISCLOSURE}")
    try:
        audio = synthesize_voice(answer, config=config)
        send_voice(chat_id, audio, messages.AI_DISCLOSURE)
    except Exception as voice_error:
        log_event(
            "voice",
            "Failed to synthesize or send voice",
            {"chat_id": chat_id, "error": str(voice_error)},
        )


def answer_with_ai(
    redis_client: redis.Redis,
    chat_id: int,
    prompt: str,
    config: Mapping[str, Any],
    debug: bool = False,
) -> str:
    daily_quota = int(config.get("daily_quota") or 0)
    allowed, used = check_and_consume_quota(redis_client, chat_id, daily_quota)
    if not allowed:
        send_text(chat_id, messages.quota_exceeded_text(used, daily_quota))
        return "quota exceeded"

    blocked, minutes_left = is_completion_blocked(redis_client)
    if blocked:
        log_event(
            "backoff",
            "Skipping completion, backoff active",
            {"chat_id": chat_id, "minutes_left": minutes_left},
        )
        send_text(chat_id, messages.backoff_active_text(minutes_left))
        return "backoff active"

    settings = get_user_settings(redis_client, chat_id)
    result, outcome = complete(prompt, settings["tone"], config=config)

    if outcome == OUTCOME_QUOTA_EXHAUSTED:
        trip_completion_backoff(redis_client, int(config.get("backoff_seconds") or 1))

    if debug:
        send_text(chat_id, json.dumps(result, ensure_ascii=False, indent=2))
        return "debug sent"

    deliver_answer(chat_id, result["answer"], outcome, config)
    return "answered"


def handle_msg(chat_id: int, text: str, update_id: Optional[int] = None) -> str:
    config = load_bot_config()
    redis_client = config_redis()

    if not mark_update_seen(redis_client, update_id):
        log_event("webhook", "Duplicate update ignored", {"update_id": update_id})
        return "duplicate"

    try:
        return route_message(redis_client, chat_id, text, config)
    except Exception:
        forget_update(redis_client, update_id)
        raise


def route_message(
    redis_client: redis.Redis, chat_id: int, text: str, config: Mapping[str, Any]
) -> str:
    reply = handle_command(redis_client, chat_id, text, config)
    if reply is not None:
        send_text(chat_id, reply)
        return "command"

    debug_prompt = get_debug_prompt(text)
    if debug_prompt is not None:
        return answer_with_ai(redis_client, chat_id, debug_prompt, config, debug=True)

    return answer_with_ai(redis_client, chat_id, text, config)


def is_secret_token_valid(request: Request) -> bool:
    expected = load_bot_config().get("webhook_secret")
    if not expected:
        return True
    secret_token = request.headers.get(SECRET_TOKEN_HEADER)
    if not secret_token:
        return False
    return hmac.compare_digest(str(secret_token), str(expected))


def process_update(update: Any) -> Tuple[str, int]:
    chat_update = extract_chat_update(update)
    if chat_update is None:
        log_event("webhook", "No message to handle in update", {"update": update})
        return "ok", 200

    chat_id, text = chat_update
    log_event(
        "webhook",
        "Incoming message",
        {"chat_id": chat_id, "update_id": update.get("update_id")},
    )

    if not load_bot_config().get("openai_api_key"):
        log_event("webhook", "Missing OPENAI_API_KEY")
        return "missing openai api key", 500

    try:
        outcome = handle_msg(chat_id, text, update.get("update_id"))
        log_event("webhook", "Update handled", {"chat_id": chat_id, "outcome": outcome})
    except Exception as e:
        error_msg = f"Message processing error: {str(e)}"
        print(error_msg)
        admin_report(error_msg, e, {"chat_id": chat_id})
        send_msg(chat_id, messages.OPENAI_CONNECTION_FAILED)
        return "openai error", 502

    return "ok", 200


def process_webhook(request: Request) -> Tuple[str, int]:
    if not is_secret_token_valid(request):
        log_event("webhook", "Wrong secret token", {"path": request.path})
        return "unauthorized", 401

    try:
        update = json.loads(request.get_data(as_text=True))
    except ValueError:
        log_event("webhook", "Failed to parse Telegram update", {"path": request.path})
        return "bad json", 400

    return process_update(update)


app = Flask(__name__)


@app.route("/", defaults={"path": ""}, methods=ROUTE_METHODS)
@app.route("/<path:path>", methods=ROUTE_METHODS)
def responder(path: str = "") -> Tuple[str, int]:
    if request.method in ("GET", "HEAD") and request.path == "/":
        return "ok", 200

    webhook_path = load_bot_config().get("webhook_path")
    if request.method != "POST" or request.path != webhook_path:
        return "not found", 404

    return process_webhook(request)
