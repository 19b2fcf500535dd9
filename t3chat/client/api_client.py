"""HTTP client for the streaming chat endpoint."""

from collections.abc import AsyncIterator, Callable, Sequence

import httpx
import structlog

from t3chat.client.stream_ingestor import iter_fragments
from t3chat.core.exceptions import UpstreamResponseError
from t3chat.schemas.chat_schema import ChatRequest, HistoryMessage
from t3chat.schemas.session_schema import Message

logger = structlog.get_logger()


class ChatApiClient:
    """Issues one streaming request per exchange and yields its fragments."""

    def __init__(self, http: httpx.AsyncClient, stream_url: str) -> None:
        self._http = http
        self._stream_url = stream_url

    @staticmethod
    def build_request(history: Sequence[Message], prompt: str) -> ChatRequest:
        return ChatRequest(
            message_history=[
                HistoryMessage(role=m.role, content=m.content) for m in history
            ],
            prompt=prompt,
        )

    async def stream_reply(
        self,
        history: Sequence[Message],
        prompt: str,
        on_open: Callable[[], None] | None = None,
    ) -> AsyncIterator[str]:
        """POST the exchange and yield reply fragments as they arrive.

        ``on_open`` runs once the endpoint has answered with a success status,
        before the body is read.

        Raises:
            UpstreamResponseError: the endpoint answered with an error status.
            httpx.HTTPError: the request or the body read failed.
        """
        body = self.build_request(history, prompt).model_dump(by_alias=True)
        async with self._http.stream("POST", self._stream_url, json=body) as response:
            if response.is_error:
                logger.warning(
                    "Chat endpoint rejected request",
                    status_code=response.status_code,
                    url=self._stream_url,
                )
                raise UpstreamResponseError(response.status_code)
            if on_open is not None:
                on_open()
            async for fragment in iter_fragments(response.aiter_bytes()):
                yield fragment
