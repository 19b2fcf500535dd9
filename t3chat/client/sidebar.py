"""Sidebar listing of saved chat sessions."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from t3chat.client.notifier import StorageEventListener
from t3chat.client.session_store import SessionStore
from t3chat.schemas.session_schema import utc_now

logger = structlog.get_logger()


def format_relative_date(when: datetime, now: datetime | None = None) -> str:
    """Describe how long ago ``when`` was, in whole days."""
    now = now or utc_now()
    days = (now - when).days
    if days <= 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return when.date().isoformat()


@dataclass(frozen=True)
class SidebarEntry:
    """Summary of one session as shown in the sidebar."""

    session_id: str
    title: str
    updated_at: datetime
    updated_label: str
    message_count: int


class SidebarLister:
    """Read-only view over the session store, most recently updated first.

    Reloads on mount, on in-process change notifications and on storage
    events for the sessions key coming from other processes.
    """

    def __init__(
        self,
        store: SessionStore,
        on_select: Callable[[str], None],
        on_new_chat: Callable[[], None],
        clock: Callable[[], datetime] = utc_now,
        storage_events: StorageEventListener | None = None,
    ) -> None:
        self._store = store
        self._on_select = on_select
        self._on_new_chat = on_new_chat
        self._clock = clock
        self._storage_events = storage_events
        self._entries: list[SidebarEntry] = []
        self._unsubscribe: list[Callable[[], None]] = []

    @property
    def entries(self) -> list[SidebarEntry]:
        return list(self._entries)

    def mount(self) -> None:
        self.refresh()
        if self._unsubscribe:
            return
        self._unsubscribe.append(self._store.bus.subscribe(self.refresh))
        if self._storage_events is not None:
            self._storage_events.listen()
            self._unsubscribe.append(
                self._storage_events.subscribe(self.handle_storage_event)
            )

    def unmount(self) -> None:
        while self._unsubscribe:
            self._unsubscribe.pop()()

    def refresh(self) -> None:
        now = self._clock()
        sessions = sorted(self._store.load(), key=lambda s: s.updated_at, reverse=True)
        self._entries = [
            SidebarEntry(
                session_id=s.id,
                title=s.title,
                updated_at=s.updated_at,
                updated_label=format_relative_date(s.updated_at, now),
                message_count=len(s.messages),
            )
            for s in sessions
        ]
        logger.debug("Sidebar refreshed", session_count=len(self._entries))

    def handle_storage_event(self, key: str) -> None:
        """React to a change made by another process."""
        if key == self._store.key:
            self.refresh()

    def select(self, session_id: str) -> None:
        self._on_select(session_id)

    def new_chat(self) -> None:
        self._on_new_chat()
