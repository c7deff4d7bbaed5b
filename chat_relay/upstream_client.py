"""Async HTTP client forwarding translated requests to the upstream service."""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .upstream_models import UpstreamError, UpstreamRequest

logger = logging.getLogger(__name__)

CLIENT_VERSION = "4.73.1"

BASE_HEADERS: Dict[str, str] = {
    "accept": "application/json",
    "content-type": "application/json",
    "user-agent": f"qi/JS {CLIENT_VERSION}",
    "x-stainless-lang": "js",
    "x-stainless-package-version": CLIENT_VERSION,
    "x-stainless-os": "Linux",
    "x-stainless-arch": "x64",
    "x-stainless-runtime": "node",
    "x-stainless-runtime-version": "v22.17.0",
    "version": "1.1",
    "x-stainless-retry-count": "0",
}


class UpstreamClient:
    """Single-shot, non-streaming calls to the upstream chat endpoint. No retries."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.url = settings.AI_URL

        # No timeout unless configured: the caller's transport bounds latency
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.UPSTREAM_TIMEOUT),
            headers=BASE_HEADERS,
            follow_redirects=True,
            transport=transport,
        )

    def _request_headers(self, request_id: Optional[str]) -> Dict[str, str]:
        headers = {"Connection": "close"}
        if request_id:
            headers["x-request-id"] = request_id
        if self.settings.UPSTREAM_USER_ID:
            headers["userid"] = self.settings.UPSTREAM_USER_ID
        return headers

    async def send(self, payload: UpstreamRequest, request_id: Optional[str] = None) -> Any:
        """
        POST the payload and return the decoded reply body.

        JSON bodies are decoded; anything else is returned as text.
        Raises UpstreamError on a non-2xx status or transport failure.
        """
        body = payload.model_dump()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Sending request upstream %s - request_id=%s payload=%s",
                self.url,
                request_id,
                json.dumps(body, ensure_ascii=False),
            )

        try:
            resp = await self.client.post(self.url, json=body, headers=self._request_headers(request_id))
        except httpx.HTTPError as e:
            logger.error(f"Upstream request failed: {self.url} - {e!r}")
            raise UpstreamError(f"Upstream request failed: {e}") from e

        data = _decode_body(resp)

        if not resp.is_success:
            logger.error(f"Upstream request failed: {self.url} - HTTP {resp.status_code}")
            raise UpstreamError(
                f"Upstream request failed with status code {resp.status_code}",
                resp.status_code,
                data,
            )

        logger.debug("Upstream replied - request_id=%s status=%s", request_id, resp.status_code)
        return data

    async def close(self):
        """Close underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _decode_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
