"""
Shared fixtures.
The app module builds its settings at import time, so the upstream URL is
provided through the environment before anything from chat_relay is imported.
"""

import os

os.environ.setdefault("AI_URL", "http://upstream.test/api/chat")

import pytest
from unittest.mock import AsyncMock

from chat_relay.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        AI_URL="http://upstream.test/api/chat",
        WORKING_DIRECTORY=str(tmp_path),
        STREAM_CHUNK_SIZE=500,
    )


@pytest.fixture
def upstream():
    """Stand-in for UpstreamClient; set upstream.send.return_value / side_effect."""
    client = AsyncMock()
    client.send = AsyncMock(return_value={"message": {"content": "HELLO"}})
    return client


@pytest.fixture
def client(settings, upstream):
    from fastapi.testclient import TestClient
    from chat_relay.main import create_app

    app = create_app(settings)
    app.state.upstream_client = upstream
    with TestClient(app) as c:
        yield c
