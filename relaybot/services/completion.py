"""OpenAI Responses API client and response normalization."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, cast

import openai
from openai import OpenAI

from relaybot import messages
from relaybot.config import load_bot_config
from relaybot.services.settings import DEFAULT_TONE
from relaybot.utils import log_event

__all__ = [
    "OUTCOME_NETWORK_ERROR",
    "OUTCOME_OK",
    "OUTCOME_QUOTA_EXHAUSTED",
    "OUTCOME_UPSTREAM_ERROR",
    "TONE_INSTRUCTIONS",
    "build_completion_input",
    "build_openai_client",
    "complete",
    "extract_answer_text",
    "extract_meta",
    "extract_usage",
]


OUTCOME_OK = "ok"
OUTCOME_QUOTA_EXHAUSTED = "quota_exhausted"
OUTCOME_UPSTREAM_ERROR = "upstream_error"
OUTCOME_NETWORK_ERROR = "network_error"

QUOTA_EXHAUSTED_STATUS = 429

BASE_INSTRUCTION = (
    "You are a helpful AI assistant replying in the same language the user used."
)
TONE_INSTRUCTIONS: Dict[str, str] = {
    "friendly": BASE_INSTRUCTION
    + " Use a warm, friendly and casual tone, like talking to a friend.",
    "formal": BASE_INSTRUCTION
    + " Use a formal and polite tone, with respectful and professional wording.",
    "technical": BASE_INSTRUCTION
    + " Use a precise technical tone: be exact, structured and include relevant details.",
}


def build_openai_client(config: Optional[Mapping[str, Any]] = None) -> OpenAI:
    """Create an OpenAI client without automatic retries."""

    config = config or load_bot_config()
    return OpenAI(
        api_key=config.get("openai_api_key"),
        max_retries=0,
        timeout=float(config.get("openai_timeout") or 60),
    )


def build_completion_input(prompt: str, tone: str) -> List[Dict[str, Any]]:
    instruction = TONE_INSTRUCTIONS.get(tone, TONE_INSTRUCTIONS[DEFAULT_TONE])
    return [
        {
            "role": "system",
            "content": [{"type": "input_text", "text": instruction}],
        },
        {
            "role": "user",
            "content": [{"type": "input_text", "text": prompt}],
        },
    ]


def _top_level_output_text(data: Mapping[str, Any]) -> Optional[str]:
    value = data.get("output_text")
    if isinstance(value, str) and value.strip():
        return value
    return None


def _first_output_text_part(data: Mapping[str, Any]) -> Optional[str]:
    output = data.get("output")
    if not isinstance(output, list):
        return None
    for item in output:
        if not isinstance(item, dict):
            continue
        for part in item.get("content") or []:
            if not isinstance(part, dict) or part.get("type") != "output_text":
                continue
            text = part.get("text")
            if isinstance(text, str) and text.strip():
                return text
    return None


ANSWER_EXTRACTORS: Tuple[Callable[[Mapping[str, Any]], Optional[str]], ...] = (
    _top_level_output_text,
    _first_output_text_part,
)


def extract_answer_text(data: Any) -> str:
    """Return the first non-blank answer found in a Responses API payload."""

    if isinstance(data, dict):
        for extractor in ANSWER_EXTRACTORS:
            text = extractor(data)
            if text:
                return text.strip()
    return messages.NO_ANSWER_RECEIVED


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def extract_usage(data: Any) -> Dict[str, Optional[int]]:
    usage = data.get("usage") if isinstance(data, dict) else None
    if not isinstance(usage, dict):
        usage = {}
    input_tokens = _int_or_none(usage.get("input_tokens"))
    output_tokens = _int_or_none(usage.get("output_tokens"))
    total_tokens = None
    if input_tokens is not None and output_tokens is not None:
        total_tokens = input_tokens + output_tokens
    return {
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": total_tokens,
    }


def extract_meta(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return {"id": None, "created": None, "stop_reason": None}

    stop_reason = None
    output = data.get("output")
    if isinstance(output, list) and output and isinstance(output[0], dict):
        stop_reason = output[0].get("stop_reason") or output[0].get("finish_reason")
    if stop_reason is None:
        details = data.get("incomplete_details")
        if isinstance(details, dict):
            stop_reason = details.get("reason")

    created = data.get("created")
    if created is None:
        created = data.get("created_at")

    return {"id": data.get("id"), "created": created, "stop_reason": stop_reason}


def _response_to_dict(response: Any) -> Dict[str, Any]:
    if isinstance(response, dict):
        return response
    data: Dict[str, Any] = {}
    if hasattr(response, "model_dump"):
        dumped = response.model_dump()
        if isinstance(dumped, dict):
            data = dumped
    if "output_text" not in data:
        # output_text is a computed property on SDK response objects
        output_text = getattr(response, "output_text", None)
        if isinstance(output_text, str):
            data["output_text"] = output_text
    return data


def _build_result(
    model: str, prompt: str, answer: str, data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return {
        "model": model,
        "input": prompt,
        "answer": answer,
        "usage": extract_usage(data or {}),
        "meta": extract_meta(data or {}),
    }


def complete(
    prompt: str,
    tone: str = DEFAULT_TONE,
    *,
    client: Optional[OpenAI] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> Tuple[Dict[str, Any], str]:
    """
    Ask the model for an answer to ``prompt``.
    Returns ``(result, outcome)``; upstream failures become canned answers.
    """

    config = config or load_bot_config()
    model = str(config.get("openai_model"))
    client = client or build_openai_client(config)

    try:
        response = client.responses.create(
            model=model,
            input=cast(Any, build_completion_input(prompt, tone)),
            max_output_tokens=int(config.get("max_output_tokens") or 1024),
        )
    except openai.APIStatusError as error:
        status = getattr(error, "status_code", None)
        log_event(
            "completion",
            "OpenAI request failed",
            {"status": status, "error": str(error)},
        )
        if status == QUOTA_EXHAUSTED_STATUS:
            return (
                _build_result(model, prompt, messages.OPENAI_QUOTA_EXHAUSTED),
                OUTCOME_QUOTA_EXHAUSTED,
            )
        return _build_result(model, prompt, messages.OPENAI_UNAVAILABLE), OUTCOME_UPSTREAM_ERROR
    except openai.APIConnectionError as error:
        log_event("completion", "OpenAI unreachable", {"error": str(error)})
        return (
            _build_result(model, prompt, messages.OPENAI_CONNECTION_FAILED),
            OUTCOME_NETWORK_ERROR,
        )
    except openai.APIError as error:
        log_event("completion", "OpenAI returned an invalid response", {"error": str(error)})
        return _build_result(model, prompt, messages.OPENAI_UNAVAILABLE), OUTCOME_UPSTREAM_ERROR

    data = _response_to_dict(response)
    answer = extract_answer_text(data)
    return _build_result(model, prompt, answer, data), OUTCOME_OK
