"""Synthesize an OpenAI-compatible SSE stream from an already complete reply."""

import json
import logging
from typing import Any, Callable, Dict, Iterator, Optional

from .responses import FALLBACK_MODEL, make_completion_id, now_seconds

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500


def _chunk_payload(
    chunk_id: str,
    model: str,
    created: int,
    delta_content: Optional[str] = None,
    delta_role: Optional[str] = None,
    finish_reason: Optional[str] = None,
) -> Dict[str, Any]:
    delta: Dict[str, Any] = {}
    if delta_role is not None:
        delta["role"] = delta_role
    if delta_content is not None:
        delta["content"] = delta_content

    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "choices": [
            {
                "index": 0,
                "delta": delta,
                "logprobs": None,
                "finish_reason": finish_reason,
            }
        ],
    }


def _sse_encode(obj: Dict[str, Any]) -> bytes:
    return f"data: {json.dumps(obj, ensure_ascii=False)}\n\n".encode("utf-8")


def _sse_done() -> bytes:
    return b"data: [DONE]\n\n"


def iter_stream_events(
    text: Optional[str],
    model: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    completion_id: Optional[str] = None,
    created: Optional[int] = None,
) -> Iterator[bytes]:
    """
    Yield SSE events re-chunking ``text``.

    Order: one role chunk, one content chunk per ``chunk_size`` slice, a
    terminal chunk with finish_reason "stop", then ``data: [DONE]``. All chunks
    share one id and created timestamp. Empty text still yields the role and
    terminal chunks.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    text = text or ""
    model = model or FALLBACK_MODEL
    chunk_id = completion_id or make_completion_id()
    created = created if created is not None else now_seconds()

    # Initial assistant role chunk (per OpenAI)
    yield _sse_encode(_chunk_payload(chunk_id, model, created, delta_role="assistant"))

    for start in range(0, len(text), chunk_size):
        yield _sse_encode(
            _chunk_payload(chunk_id, model, created, delta_content=text[start:start + chunk_size])
        )

    # Final control chunk with finish reason and empty delta
    yield _sse_encode(_chunk_payload(chunk_id, model, created, finish_reason="stop"))

    yield _sse_done()

    logger.debug(f"Synthesized stream {chunk_id}: {len(text)} chars")


def synthesize(
    text: Optional[str],
    model: str,
    emit: Callable[[bytes], None],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> None:
    """Push every event of the synthetic stream to ``emit``, in order."""
    for event in iter_stream_events(text, model, chunk_size=chunk_size):
        emit(event)
