"""
Tests for the outbound upstream client.
Run with: pytest tests/test_upstream_client.py
"""

import json

import httpx
import pytest

from chat_relay.openai_models import ChatCompletionsRequest
from chat_relay.payload_builder import build_upstream_request
from chat_relay.upstream_client import UpstreamClient
from chat_relay.upstream_models import UpstreamError


def make_client(settings, handler):
    return UpstreamClient(settings, transport=httpx.MockTransport(handler))


@pytest.fixture
def payload(settings):
    body = ChatCompletionsRequest(messages=[{"role": "user", "content": "hi"}])
    return build_upstream_request(body, settings)


@pytest.mark.asyncio
async def test_send_posts_payload_and_headers(settings, payload):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["method"] = request.method
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": {"content": "HELLO"}})

    async with make_client(settings, handler) as client:
        result = await client.send(payload, request_id="req-1")

    assert result == {"message": {"content": "HELLO"}}
    assert seen["method"] == "POST"
    assert seen["url"] == settings.AI_URL
    assert seen["headers"]["content-type"] == "application/json"
    assert seen["headers"]["x-request-id"] == "req-1"
    assert seen["headers"]["x-stainless-retry-count"] == "0"
    assert "userid" not in seen["headers"]
    assert seen["body"]["parameters"]["stream"] is False
    assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_userid_header_when_configured(settings, payload):
    seen = {}

    def handler(request: httpx.Request):
        seen["headers"] = request.headers
        return httpx.Response(200, json={})

    custom = settings.model_copy(update={"UPSTREAM_USER_ID": "user-42"})
    async with make_client(custom, handler) as client:
        await client.send(payload)

    assert seen["headers"]["userid"] == "user-42"


@pytest.mark.asyncio
async def test_non_json_reply_returned_as_text(settings, payload):
    def handler(request):
        return httpx.Response(200, text="plain answer")

    async with make_client(settings, handler) as client:
        assert await client.send(payload) == "plain answer"


@pytest.mark.asyncio
async def test_error_status_raises_with_body(settings, payload):
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "bad key", "code": "invalid_api_key"}})

    async with make_client(settings, handler) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.send(payload)

    err = exc_info.value
    assert err.status_code == 401
    assert err.error_body == {"message": "bad key", "code": "invalid_api_key"}


@pytest.mark.asyncio
async def test_transport_failure_raises_without_status(settings, payload):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(settings, handler) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.send(payload)

    assert exc_info.value.status_code is None
    assert exc_info.value.error_body is None
    assert "connection refused" in exc_info.value.message
