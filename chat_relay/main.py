"""FastAPI entrypoint for the OpenAI-compatible relay"""

from contextlib import asynccontextmanager
import logging
import os
import sys
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .routes_openai import router as openai_router
from .config import Settings, get_settings
from .errors import error_response, invalid_request_response, map_generic_error
from .text_utils import make_request_id, redact_headers, truncate_for_log

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("OpenAI-compatible API server running on port %s", settings.PORT)
    logger.info("Chat completions endpoint: http://localhost:%s/v1/chat/completions", settings.PORT)

    # app.state.upstream_client is created lazily in routes
    yield
    logger.info("Shutting down relay")
    client = getattr(app.state, "upstream_client", None)
    if client:
        try:
            await client.close()
            logger.info("HTTP client closed successfully")
        except Exception as e:
            logger.error(f"Error closing HTTP client: {e}")


async def log_request_response_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or make_request_id()
    request.state.request_id = request_id
    start = time.monotonic()
    client_host = request.client.host if request.client else None

    if logger.isEnabledFor(logging.DEBUG):
        body = await request.body()
        logger.debug(
            "Incoming %s %s id=%s ip=%s headers=%s body=%s",
            request.method,
            request.url.path,
            request_id,
            client_host,
            redact_headers(request.headers),
            truncate_for_log(body, request.app.state.settings.LOG_REQUEST_BODY_MAX_LENGTH),
        )
    else:
        logger.info("Incoming %s %s id=%s ip=%s", request.method, request.url.path, request_id, client_host)

    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id

    logger.info(
        "Response for %s %s id=%s - status=%s duration_ms=%d",
        request.method,
        request.url.path,
        request_id,
        response.status_code,
        (time.monotonic() - start) * 1000,
    )
    return response


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    # A known path without a handler for this method is an unmatched route too
    if exc.status_code in (404, 405):
        logger.warning(
            "Route not found: %s %s id=%s",
            request.method,
            request.url.path,
            getattr(request.state, "request_id", None),
        )
        return error_response(
            f"Route not found: {request.method} {request.url.path}",
            404,
            {"code": "not_found"},
        )
    return error_response(str(exc.detail), exc.status_code)


async def handle_validation_exception(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    # Drop the leading "body" segment of the location
    loc = [str(p) for p in first.get("loc", ()) if p != "body"]
    param = ".".join(loc) or None
    message = first.get("msg") or "Invalid request body"

    logger.warning(
        "Validation error on %s %s: errors=%s",
        request.method,
        request.url.path,
        errors,
    )
    return invalid_request_response(f"Invalid request: {message}", param=param)


async def handle_unexpected_exception(request: Request, exc: Exception):
    return map_generic_error(exc)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="OpenAI-compatible chat relay",
        version="0.1.0",
        description="Translates OpenAI chat completions to a custom upstream",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Optional CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )
    app.middleware("http")(log_request_response_middleware)

    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)

    app.include_router(openai_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


def main():
    """Entry point for the application"""
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
