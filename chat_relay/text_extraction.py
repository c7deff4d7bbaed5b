"""Normalize loosely-typed upstream replies into a single text value.

The upstream reply shape is not fixed. Each matcher below recognizes one shape
and returns its text, or ``None`` to let the next matcher try. The first match
wins; anything unrecognized is serialized whole.
"""

import json
import logging
from typing import Any, Callable, List, Mapping, Optional

logger = logging.getLogger(__name__)

ShapeMatcher = Callable[[Any], Optional[str]]


def _field(obj: Any, name: str) -> Any:
    return obj.get(name) if isinstance(obj, Mapping) else None


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _match_missing(payload: Any) -> Optional[str]:
    return "" if payload is None else None


def _match_plain_string(payload: Any) -> Optional[str]:
    return _string(payload)


def _match_choices(payload: Any) -> Optional[str]:
    # OpenAI completion, legacy text completion, or a single stream chunk
    choices = _field(payload, "choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    for candidate in (
        _field(_field(first, "message"), "content"),
        _field(first, "text"),
        _field(_field(first, "delta"), "content"),
    ):
        if isinstance(candidate, str):
            return candidate
    return None


def _match_message_content(payload: Any) -> Optional[str]:
    return _string(_field(_field(payload, "message"), "content"))


def _match_content(payload: Any) -> Optional[str]:
    return _string(_field(payload, "content"))


def _match_text(payload: Any) -> Optional[str]:
    return _string(_field(payload, "text"))


SHAPE_MATCHERS: List[ShapeMatcher] = [
    _match_missing,
    _match_plain_string,
    _match_choices,
    _match_message_content,
    _match_content,
    _match_text,
]


def _serialize(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(payload)


def extract_text(payload: Any) -> str:
    """Return the reply text carried by ``payload``. Never raises."""
    try:
        for matcher in SHAPE_MATCHERS:
            text = matcher(payload)
            if text is not None:
                return text
        return _serialize(payload)
    except Exception as e:
        logger.warning(f"Failed to extract text from upstream payload: {e}")
        return ""
