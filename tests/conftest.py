"""Pytest configuration and fixtures."""

import json
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Iterable
from unittest.mock import MagicMock

import fakeredis
import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessageChunk

from t3chat.client.api_client import ChatApiClient
from t3chat.client.notifier import SessionChangeBus
from t3chat.client.session_store import PendingPromptStore, SessionStore
from t3chat.client.storage import RedisStorage
from t3chat.core.config import settings
from t3chat.core.settings import StorageConfig

STREAM_URL = "http://test/api/v1/chat/stream"


# --- Wire helpers ---


def sse_lines(*fragments: str, done: bool = True) -> bytes:
    """Encode fragments the way the streaming endpoint frames them."""
    body = "".join(
        f"data: {json.dumps({'content': f}, ensure_ascii=False)}\n\n"
        for f in fragments
    )
    if done:
        body += "data: [DONE]\n\n"
    return body.encode()


def split_bytes(data: bytes, size: int) -> list[bytes]:
    """Cut a byte string into fixed-size chunks."""
    return [data[i : i + size] for i in range(0, len(data), size)]


async def aiter_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def sse_response(chunks: Iterable[bytes], status_code: int = 200) -> httpx.Response:
    """Build a streamed text/event-stream response from raw chunks."""
    return httpx.Response(
        status_code,
        headers={"content-type": "text/event-stream"},
        content=aiter_chunks(list(chunks)),
    )


def make_api_client(
    handler: Callable[[httpx.Request], object],
) -> tuple[ChatApiClient, httpx.AsyncClient]:
    """ChatApiClient talking to an in-process mock transport."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatApiClient(http, STREAM_URL), http


# --- Storage (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.FakeRedis:
    """Create a fresh fake Redis client."""
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def storage_config() -> StorageConfig:
    return settings.storage


@pytest.fixture
def storage(fake_redis: fakeredis.FakeRedis, storage_config: StorageConfig) -> RedisStorage:
    return RedisStorage(fake_redis, storage_config, origin="test-origin")


@pytest.fixture
def bus() -> SessionChangeBus:
    return SessionChangeBus()


@pytest.fixture
def session_store(
    storage: RedisStorage, storage_config: StorageConfig, bus: SessionChangeBus
) -> SessionStore:
    return SessionStore(storage, storage_config.sessions_key, bus)


@pytest.fixture
def pending_store(
    storage: RedisStorage, storage_config: StorageConfig
) -> PendingPromptStore:
    return PendingPromptStore(storage, storage_config.pending_prompt_key)


# --- Mock LLM ---


def make_streaming_llm(*chunks: str) -> MagicMock:
    """Mock chat model whose astream yields the given chunks."""

    async def _astream(messages: object) -> AsyncIterator[AIMessageChunk]:
        for chunk in chunks:
            yield AIMessageChunk(content=chunk)

    mock = MagicMock(spec=BaseChatModel)
    mock.astream = MagicMock(side_effect=_astream)
    return mock


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM streaming a short reply."""
    return make_streaming_llm("Recur", "", "sion is...")


# --- App client ---


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async test client without dependency overrides."""
    from t3chat.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
