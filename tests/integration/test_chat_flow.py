"""End-to-end chat flow: client core against the streaming app."""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from t3chat.client.api_client import ChatApiClient
from t3chat.client.chat_controller import ChatController, ExchangeState
from t3chat.client.new_chat import start_new_chat
from t3chat.client.session_store import PendingPromptStore, SessionStore
from t3chat.client.sidebar import SidebarLister
from t3chat.dependencies import get_completion_service
from t3chat.services.completion_service import CompletionService


@pytest.fixture
async def http_client(mock_llm: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    from t3chat.main import app

    app.dependency_overrides[get_completion_service] = lambda: CompletionService(
        mock_llm
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestChatFlow:
    """New chat, pending prompt handover, streamed reply and sidebar."""

    @pytest.mark.asyncio
    async def test_new_chat_round_trip(
        self,
        http_client: AsyncClient,
        session_store: SessionStore,
        pending_store: PendingPromptStore,
    ) -> None:
        sidebar = SidebarLister(
            session_store, on_select=lambda _: None, on_new_chat=lambda: None
        )
        sidebar.mount()

        session_id = start_new_chat("Explain recursion", session_store, pending_store)
        assert session_id is not None
        assert [e.title for e in sidebar.entries] == ["Explain recursion"]

        api = ChatApiClient(http_client, "http://test/api/v1/chat/stream")
        controller = ChatController.open(session_id, session_store, api, pending_store)
        task = controller.consume_pending_prompt()
        assert task is not None
        await task

        assert controller.state is ExchangeState.IDLE
        assert [m.content for m in controller.session.messages] == [
            "Explain recursion",
            "Recursion is...",
        ]
        stored = session_store.find_by_id(session_id)
        assert stored is not None
        assert stored.title == "Explain recursion"
        assert len(stored.messages) == 2
        assert sidebar.entries[0].message_count == 2

    @pytest.mark.asyncio
    async def test_unknown_endpoint_yields_apology(
        self, http_client: AsyncClient, session_store: SessionStore
    ) -> None:
        api = ChatApiClient(http_client, "http://test/api/v1/chat/missing")
        controller = ChatController.open("chat-x", session_store, api)

        await controller.submit_user_message("hello")  # type: ignore[misc]

        assert controller.session.messages[-1].content == (
            "Sorry, I encountered an error. Please try again."
        )
