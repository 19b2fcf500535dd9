"""Persistence of chat sessions in client-side key-value storage.

The whole collection lives under one key as a JSON array. Callers always
read the full collection, change the record they care about and write the
full collection back. Two processes doing this at once can overwrite each
other's change; the last write wins.
"""

from collections.abc import Sequence

import redis
import structlog
from pydantic import ValidationError

from t3chat.client.notifier import SessionChangeBus
from t3chat.client.storage import RedisStorage
from t3chat.schemas.session_schema import ChatSession, SessionList

logger = structlog.get_logger()


class SessionStore:
    """Load and save the full collection of chat sessions."""

    def __init__(
        self,
        storage: RedisStorage,
        key: str,
        bus: SessionChangeBus | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._bus = bus if bus is not None else SessionChangeBus()

    @property
    def key(self) -> str:
        return self._key

    @property
    def bus(self) -> SessionChangeBus:
        return self._bus

    def load(self) -> list[ChatSession]:
        """Return every stored session, or an empty list if none are readable."""
        return self._read() or []

    def _read(self) -> list[ChatSession] | None:
        """Stored sessions, or None when the stored value cannot be read."""
        try:
            raw = self._storage.get(self._key)
        except redis.RedisError:
            logger.exception("Failed to read chat sessions", key=self._key)
            return None
        if not raw:
            return []
        try:
            return SessionList.validate_json(raw)
        except (ValidationError, ValueError):
            logger.warning("Stored chat sessions are unreadable", key=self._key)
            return None

    def save(self, sessions: Sequence[ChatSession]) -> bool:
        """Overwrite the stored collection in a single write.

        Returns False when the storage is unavailable; the caller keeps
        working from its in-memory state.
        """
        payload = SessionList.dump_json(list(sessions), by_alias=True).decode()
        try:
            self._storage.set(self._key, payload)
        except redis.RedisError:
            logger.exception(
                "Failed to save chat sessions",
                key=self._key,
                session_count=len(sessions),
            )
            return False
        self._bus.publish()
        return True

    def find_by_id(self, session_id: str) -> ChatSession | None:
        return next((s for s in self.load() if s.id == session_id), None)

    def upsert(self, session: ChatSession) -> bool:
        """Replace the stored record with the same id, or append it.

        Nothing is written when the stored collection cannot be read, so the
        other records survive a failed read.
        """
        sessions = self._read()
        if sessions is None:
            logger.warning("Skipping chat session save", session_id=session.id)
            return False
        for index, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[index] = session
                break
        else:
            sessions.append(session)
        return self.save(sessions)

    def prepend(self, session: ChatSession) -> bool:
        """Insert a new record in front of the stored ones."""
        stored = self._read()
        if stored is None:
            logger.warning("Skipping chat session save", session_id=session.id)
            return False
        return self.save([session, *(s for s in stored if s.id != session.id)])


class PendingPromptStore:
    """Holds at most one prompt handed over to a freshly opened chat view."""

    def __init__(self, storage: RedisStorage, key: str) -> None:
        self._storage = storage
        self._key = key

    def put(self, text: str) -> bool:
        try:
            self._storage.set(self._key, text)
        except redis.RedisError:
            logger.exception("Failed to store pending prompt", key=self._key)
            return False
        return True

    def take(self) -> str | None:
        """Return the pending prompt and delete it."""
        try:
            return self._storage.pop(self._key)
        except redis.RedisError:
            logger.exception("Failed to read pending prompt", key=self._key)
            return None
