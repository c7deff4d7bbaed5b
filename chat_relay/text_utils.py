"""Helpers for request logging: ids, header redaction and body truncation."""

import json
import secrets
import string
import time
from typing import Any, Mapping, Dict

SENSITIVE_HEADERS = frozenset({
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "api-key",
    "x-openai-api-key",
    "cookie",
    "set-cookie",
})

REDACTED = "[REDACTED]"

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def make_request_id() -> str:
    """Millisecond timestamp plus a short random suffix, both base-36."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{_to_base36(int(time.time() * 1000))}-{suffix}"


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy headers with credentials and cookies masked."""
    return {
        k: (REDACTED if k.lower() in SENSITIVE_HEADERS else v)
        for k, v in (headers or {}).items()
    }


def truncate_for_log(value: Any, max_length: int = 5000) -> str:
    """
    Render value as a string for logging, cut to max_length characters.

    Args:
        value: str, bytes or any JSON-serializable value
        max_length: Maximum number of characters kept

    Returns:
        The (possibly truncated) text with a "[truncated N chars]" notice
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value
    else:
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            return "[Unserializable]"

    if len(text) <= max_length:
        return text
    return text[:max_length] + f"... [truncated {len(text) - max_length} chars]"
