import json
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from .openai_models import ErrorDetail, ErrorEnvelope
from .upstream_models import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_STATUS = 500

_STATUS_TYPES = {
    400: "invalid_request_error",
    401: "authentication_error",
    403: "permission_error",
    404: "invalid_request_error",
    429: "rate_limit_exceeded",
}


def error_type_for_status(status: Optional[int]) -> str:
    if status is None:
        return "api_error"
    if status in _STATUS_TYPES:
        return _STATUS_TYPES[status]
    if status >= 500:
        return "server_error"
    return "api_error"


def _as_text(value: Any) -> str:
    # Upstream error fields are loosely typed; keep their content as JSON text
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


def classify_error(
    status: Optional[int],
    upstream_error: Optional[Dict[str, Any]],
    fallback_message: str,
) -> Dict[str, Any]:
    """
    Build an OpenAI-style error envelope.

    Fields present on ``upstream_error`` (message, param, code) win; otherwise
    the message falls back to ``fallback_message`` and the code to the
    stringified status (for statuses >= 400).
    """
    upstream_error = upstream_error if isinstance(upstream_error, dict) else {}

    code = upstream_error.get("code")
    if not code:
        code = str(status) if status is not None and status >= 400 else None
    elif isinstance(code, bool) or not isinstance(code, (str, int)):
        code = _as_text(code)

    message = upstream_error.get("message")
    if message and not isinstance(message, str):
        message = _as_text(message)

    envelope = ErrorEnvelope(
        error=ErrorDetail(
            message=message or fallback_message or "Internal server error",
            type=error_type_for_status(status),
            param=upstream_error.get("param"),
            code=code,
        )
    )
    return envelope.model_dump()


def error_response(message: str, status_code: int, upstream_error: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=classify_error(status_code, upstream_error, message),
    )


def invalid_request_response(message: str, param: Optional[str] = None, code: str = "invalid_request") -> JSONResponse:
    return error_response(message, 400, {"param": param, "code": code})


def map_upstream_error(err: UpstreamError) -> JSONResponse:
    """Map an upstream failure to an error response with the same status."""
    sc = err.status_code

    # Upstream failures are expected; no traceback
    logger.error(
        f"Upstream error: {err.message} (status_code={sc})",
        extra={"status_code": sc, "upstream_body": err.body},
    )

    return error_response(err.message, sc or DEFAULT_ERROR_STATUS, err.error_body)


def _status_of(err: Exception) -> int:
    for attr in ("status", "status_code"):
        value = getattr(err, attr, None)
        if isinstance(value, int) and 400 <= value <= 599:
            return value
    return DEFAULT_ERROR_STATUS


def map_generic_error(err: Exception) -> JSONResponse:
    """Map unexpected exceptions to an error response with detailed logging."""
    logger.error(
        f"Unexpected error: {type(err).__name__}: {str(err)}",
        exc_info=err,
        extra={
            "error_type": type(err).__name__,
            "error_message": str(err),
            "traceback": "".join(traceback.format_exception(type(err), err, err.__traceback__)),
        }
    )

    # Avoid leaking internal details to client
    return error_response("Internal server error", _status_of(err))
