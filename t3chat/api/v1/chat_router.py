"""Chat API router streaming model replies as Server-Sent Events."""

import asyncio
from collections.abc import AsyncGenerator
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from langchain_core.messages import BaseMessage

from t3chat.core.config import settings
from t3chat.dependencies import get_completion_service
from t3chat.schemas.chat_schema import ChatRequest, format_done, format_event
from t3chat.services.completion_service import CompletionService

logger = structlog.get_logger()

router = APIRouter(
    prefix="/api/v1/chat",
    tags=["chat"],
)

CompletionServiceDep = Annotated[CompletionService, Depends(get_completion_service)]


async def event_generator(
    completion_service: CompletionService,
    messages: list[BaseMessage],
) -> AsyncGenerator[str, None]:
    """Frame each fragment as an SSE event and finish with the sentinel.

    An upstream failure aborts the response without the sentinel so the
    client sees a broken stream.
    """
    delay = settings.server.stream_chunk_delay_seconds
    fragment_count = 0
    try:
        async for fragment in completion_service.stream_fragments(messages):
            fragment_count += 1
            yield format_event(fragment)
            if delay:
                await asyncio.sleep(delay)
    except Exception:
        logger.exception("Streaming error", fragments_sent=fragment_count)
        raise
    yield format_done()
    logger.info("Stream finished", fragments_sent=fragment_count)


@router.post("/stream")
async def stream_chat(
    request: ChatRequest,
    completion_service: CompletionServiceDep,
) -> StreamingResponse:
    """Stream the model reply as Server-Sent Events."""
    logger.info(
        "Received chat request",
        history_length=len(request.message_history),
        has_prompt=bool(request.prompt),
    )
    messages = completion_service.build_messages(request)
    return StreamingResponse(
        event_generator(completion_service, messages),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
