"""Chat view controller: user turns, streamed replies and persistence."""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import structlog

from t3chat.client.api_client import ChatApiClient
from t3chat.client.session_store import PendingPromptStore, SessionStore
from t3chat.schemas.session_schema import ChatSession, Message, utc_now
from t3chat.services.title_service import derive_title

logger = structlog.get_logger()

ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."


class ExchangeState(StrEnum):
    """Lifecycle of one user turn and its streamed reply."""

    IDLE = "idle"
    AWAITING = "awaiting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ChatViewState:
    """Immutable snapshot handed to observers after every change."""

    session_id: str
    title: str
    messages: tuple[Message, ...]
    state: ExchangeState
    streaming_message_id: str | None

    @property
    def is_loading(self) -> bool:
        return self.state in (ExchangeState.AWAITING, ExchangeState.STREAMING)


Listener = Callable[[ChatViewState], None]


class ChatController:
    """Drives a single chat view.

    At most one exchange is in flight. Every change to the message list is
    written to the session store and published to the subscribed listeners.
    """

    def __init__(
        self,
        session: ChatSession,
        store: SessionStore,
        api: ChatApiClient,
        pending: PendingPromptStore | None = None,
    ) -> None:
        self._session = session
        self._store = store
        self._api = api
        self._pending = pending
        self._state = ExchangeState.IDLE
        self._streaming_message: Message | None = None
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[Listener] = []
        self._last_message_id = 0

    @classmethod
    def open(
        cls,
        session_id: str,
        store: SessionStore,
        api: ChatApiClient,
        pending: PendingPromptStore | None = None,
    ) -> "ChatController":
        """Resume a stored session, or start an empty one under this id."""
        session = store.find_by_id(session_id)
        if session is None:
            logger.info("Starting new chat session", session_id=session_id)
            session = ChatSession(id=session_id)
        return cls(session, store, api, pending)

    @property
    def session(self) -> ChatSession:
        return self._session

    @property
    def state(self) -> ExchangeState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self.snapshot().is_loading

    @property
    def streaming_message_id(self) -> str | None:
        if self._streaming_message is None:
            return None
        return self._streaming_message.id

    def snapshot(self) -> ChatViewState:
        return ChatViewState(
            session_id=self._session.id,
            title=self._session.title,
            messages=tuple(m.model_copy() for m in self._session.messages),
            state=self._state,
            streaming_message_id=self.streaming_message_id,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register an observer; the returned function removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def submit_user_message(self, text: str) -> asyncio.Task[None] | None:
        """Start an exchange for ``text``.

        Blank input and submissions while another exchange is running are
        ignored and return None. Otherwise the user turn and an empty
        assistant turn are appended right away and the returned task streams
        the reply. Must be called with a running event loop.
        """
        prompt = text.strip()
        if not prompt or self._state is not ExchangeState.IDLE:
            return None

        history = list(self._session.messages)
        self._state = ExchangeState.AWAITING
        self._append(Message(id=self._next_message_id(), role="user", content=prompt))

        assistant = Message(id=self._next_message_id(), role="assistant")
        self._streaming_message = assistant
        self._append(assistant)

        self._task = asyncio.create_task(self._run_exchange(history, prompt, assistant))
        return self._task

    def consume_pending_prompt(self) -> asyncio.Task[None] | None:
        """Submit the prompt left behind by the new-chat view, if any."""
        if self._pending is None:
            return None
        text = self._pending.take()
        if not text:
            return None
        return self.submit_user_message(text)

    async def wait(self) -> None:
        """Wait for the in-flight exchange, if any, to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def close(self) -> None:
        """Tear down the view, cancelling the in-flight exchange."""
        self._listeners.clear()
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
        if self._streaming_message is not None:
            # Cancelled before the exchange coroutine got to run.
            self._finish(ExchangeState.COMPLETED)

    async def _run_exchange(
        self, history: list[Message], prompt: str, assistant: Message
    ) -> None:
        log = logger.bind(session_id=self._session.id, message_id=assistant.id)
        try:
            async for fragment in self._api.stream_reply(
                history, prompt, on_open=self._response_started
            ):
                assistant.content += fragment
                self._changed()
        except asyncio.CancelledError:
            log.info("Chat exchange cancelled", received=len(assistant.content))
            self._finish(ExchangeState.COMPLETED)
            raise
        except Exception:
            log.exception("Chat exchange failed")
            assistant.content = ERROR_MESSAGE
            self._finish(ExchangeState.FAILED)
        else:
            log.info("Chat exchange completed", length=len(assistant.content))
            self._finish(ExchangeState.COMPLETED)

    def _response_started(self) -> None:
        self._state = ExchangeState.STREAMING
        self._notify()

    def _finish(self, outcome: ExchangeState) -> None:
        self._streaming_message = None
        self._state = outcome
        self._changed()
        self._state = ExchangeState.IDLE
        self._notify()

    def _append(self, message: Message) -> None:
        self._session.messages.append(message)
        self._changed()

    def _changed(self) -> None:
        self._persist()
        self._notify()

    def _persist(self) -> None:
        session = self._session
        if not session.messages:
            return
        if session.has_default_title:
            first = session.first_user_message()
            if first is not None:
                session.title = derive_title(first.content)
        session.updated_at = utc_now()
        self._store.upsert(session)

    def _notify(self) -> None:
        view = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(view)
            except Exception:
                logger.exception("Chat view listener failed", session_id=view.session_id)

    def _next_message_id(self) -> str:
        self._last_message_id = max(time.time_ns(), self._last_message_id + 1)
        return str(self._last_message_id)
