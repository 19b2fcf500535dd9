"""Streaming completions from the configured chat model."""

from collections.abc import AsyncGenerator, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from t3chat.core.exceptions import InvalidChatRequestError
from t3chat.schemas.chat_schema import ChatRequest


class CompletionService:
    """Turns a chat request into a stream of text fragments."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    def build_messages(self, request: ChatRequest) -> list[BaseMessage]:
        """Map prior turns onto LangChain messages and append the prompt.

        Raises:
            InvalidChatRequestError: neither history nor prompt was given.
        """
        messages: list[BaseMessage] = []
        for turn in request.message_history:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.content))
            else:
                messages.append(AIMessage(content=turn.content))
        if request.prompt:
            messages.append(HumanMessage(content=request.prompt))
        if not messages:
            raise InvalidChatRequestError()
        return messages

    async def stream_fragments(
        self, messages: Sequence[BaseMessage]
    ) -> AsyncGenerator[str, None]:
        """Yield non-empty content chunks of the model's reply."""
        async for chunk in self._llm.astream(list(messages)):
            content = chunk.content
            if isinstance(content, str) and content:
                yield content
