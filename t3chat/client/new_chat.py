"""Starting a conversation from the empty "new chat" view."""

import uuid

import structlog

from t3chat.client.session_store import PendingPromptStore, SessionStore
from t3chat.schemas.session_schema import ChatSession
from t3chat.services.title_service import derive_title

logger = structlog.get_logger()


def start_new_chat(
    text: str, store: SessionStore, pending: PendingPromptStore
) -> str | None:
    """Create a session for ``text`` and hand the text over as pending prompt.

    Returns the new session id for navigation, or None for blank input.
    """
    if not text.strip():
        return None

    session = ChatSession(id=str(uuid.uuid4()), title=derive_title(text))
    store.prepend(session)
    pending.put(text)
    logger.info("New chat created", session_id=session.id)
    return session.id
