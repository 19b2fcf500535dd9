"""Streaming chat request schemas and wire framing."""

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DONE_SENTINEL = "[DONE]"
DATA_PREFIX = "data: "


class HistoryMessage(BaseModel):
    """One prior turn sent along with a prompt."""

    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Body of POST /api/v1/chat/stream."""

    model_config = ConfigDict(populate_by_name=True)

    message_history: list[HistoryMessage] = Field(
        default_factory=list, alias="messageHistory"
    )
    prompt: str | None = None


class StreamChunk(BaseModel):
    """Payload of a single ``data:`` event."""

    content: str


def format_event(content: str) -> str:
    """Frame one content fragment as a Server-Sent Event."""
    payload = StreamChunk(content=content).model_dump()
    return f"{DATA_PREFIX}{json.dumps(payload)}\n\n"


def format_done() -> str:
    """Frame the end-of-stream sentinel."""
    return f"{DATA_PREFIX}{DONE_SENTINEL}\n\n"
