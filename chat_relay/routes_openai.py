import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .config import Settings
from .openai_models import ChatCompletionsRequest, ModelData, ModelList
from .payload_builder import build_upstream_request
from .responses import make_completion_id, now_seconds, to_chat_completion
from .streaming import iter_stream_events
from .text_extraction import extract_text
from .upstream_client import UpstreamClient
from .errors import map_upstream_error, map_generic_error
from .upstream_models import UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _get_settings(req: Request) -> Settings:
    return req.app.state.settings


def _get_client(req: Request) -> UpstreamClient:
    client = getattr(req.app.state, "upstream_client", None)
    if client is None:
        client = UpstreamClient(_get_settings(req))
        req.app.state.upstream_client = client
    return client


def _request_id(req: Request) -> Optional[str]:
    return getattr(req.state, "request_id", None)


@router.get("/v1/models", response_model=ModelList)
@router.get("/v1/chat/models", response_model=ModelList)
async def list_models(request: Request):
    model_id = _get_settings(request).PUBLIC_MODEL_ID
    return ModelList(
        object="list",
        data=[ModelData(id=model_id, created=now_seconds(), root=model_id)],
    )


@router.post("/v1/chat/completions")
async def chat_completions(request: Request, body: Optional[ChatCompletionsRequest] = None):
    # A POST without a body is an empty request
    if body is None:
        body = ChatCompletionsRequest()
    settings = _get_settings(request)
    client = _get_client(request)
    request_id = _request_id(request)
    model_id = body.model or settings.DEFAULT_MODEL

    logger.info(
        "Chat completion request_id=%s model=%s stream=%s messages=%d",
        request_id,
        model_id,
        bool(body.stream),
        len(body.messages or []),
    )

    try:
        payload = build_upstream_request(body, settings)
        upstream = await client.send(payload, request_id=request_id)

        if body.stream:
            text = extract_text(upstream)
            # Headers are sent with the first event; all failures are handled above
            return StreamingResponse(
                iter_stream_events(
                    text,
                    model_id,
                    chunk_size=settings.STREAM_CHUNK_SIZE,
                    completion_id=make_completion_id(),
                    created=now_seconds(),
                ),
                media_type="text/event-stream; charset=utf-8",
                headers=STREAM_HEADERS,
            )

        return JSONResponse(content=to_chat_completion(upstream, model_id))

    except UpstreamError as e:
        return map_upstream_error(e)
    except Exception as e:
        return map_generic_error(e)
