"""Wrap upstream replies into OpenAI chat.completion objects."""

import logging
import time
import uuid
from typing import Any, Dict

from .openai_models import ChatChoice, ChatCompletion, ChatMessageResponse, Usage
from .text_extraction import extract_text

logger = logging.getLogger(__name__)

FALLBACK_MODEL = "gpt-3.5-turbo"


def now_seconds() -> int:
    return int(time.time())


def make_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex}"


def is_chat_completion(payload: Any) -> bool:
    """True when upstream already answered with an OpenAI chat.completion object."""
    return (
        isinstance(payload, dict)
        and payload.get("object") == "chat.completion"
        and isinstance(payload.get("choices"), list)
    )


USAGE_COUNTERS = ("prompt_tokens", "completion_tokens", "total_tokens")


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _usage_from(payload: Any) -> Dict[str, Any]:
    """
    Upstream usage, copied verbatim when all three counters are integers.
    Otherwise integer counters are kept and the rest reported as 0.
    """
    raw = payload.get("usage") if isinstance(payload, dict) else None
    if not isinstance(raw, dict):
        return Usage().model_dump()
    if all(_is_count(raw.get(k)) for k in USAGE_COUNTERS):
        return raw

    logger.debug(f"Malformed upstream usage, keeping integer counters only: {raw!r}")
    return Usage(**{k: raw[k] for k in USAGE_COUNTERS if _is_count(raw.get(k))}).model_dump()


def to_chat_completion(payload: Any, model: str) -> Dict[str, Any]:
    """
    Map an upstream reply to a chat.completion dict.

    An already-compliant reply is returned as the very same object, untouched.
    Anything else gets a fresh id/created, the extracted text as the assistant
    message and upstream usage when usable (zeros otherwise; nothing is counted
    locally).
    """
    if is_chat_completion(payload):
        return payload

    completion = ChatCompletion(
        id=make_completion_id(),
        created=now_seconds(),
        model=model or FALLBACK_MODEL,
        choices=[
            ChatChoice(
                index=0,
                message=ChatMessageResponse(content=extract_text(payload)),
                finish_reason="stop",
            )
        ],
    )
    result = completion.model_dump()
    result["usage"] = _usage_from(payload)
    return result
