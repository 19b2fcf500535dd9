"""Change notifications for the persisted session collection."""

import json
from collections.abc import Callable
from typing import Any

import redis
import structlog

logger = structlog.get_logger()

Unsubscribe = Callable[[], None]


class SessionChangeBus:
    """In-process publish/subscribe channel without payload."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        """Register a callback; the returned function removes it again."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self) -> None:
        """Invoke every subscriber, isolating their failures."""
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception:
                logger.exception("Session change subscriber failed")

    def __len__(self) -> int:
        return len(self._subscribers)


class StorageEventListener:
    """Relays storage changes made by other processes.

    Messages published by the listener's own origin are dropped, so only
    foreign writes reach the handlers. Delivery happens inside ``poll``,
    on the caller's thread.
    """

    def __init__(
        self,
        client: redis.Redis,  # type: ignore[type-arg]
        channel: str,
        origin: str,
    ) -> None:
        self._client = client
        self._channel = channel
        self._origin = origin
        self._handlers: list[Callable[[str], None]] = []
        self._pubsub: Any = None

    def subscribe(self, handler: Callable[[str], None]) -> Unsubscribe:
        """Register a handler for changed key names."""
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    def listen(self) -> None:
        """Subscribe to the change channel; later changes are queued."""
        if self._pubsub is not None:
            return
        self._pubsub = self._client.pubsub()
        self._pubsub.subscribe(self._channel)
        logger.info("Storage listener subscribed", channel=self._channel)

    def poll(self, timeout: float = 0.0) -> None:
        """Dispatch queued changes, waiting up to ``timeout`` for the first."""
        self.listen()
        message = self._pubsub.get_message(timeout=timeout)
        while message is not None:
            if message["type"] == "message":
                self.handle_message(message)
            message = self._pubsub.get_message(timeout=0.0)

    def close(self) -> None:
        if self._pubsub is not None:
            self._pubsub.close()
            self._pubsub = None

    def handle_message(self, message: dict[str, Any]) -> None:
        """Decode one pub/sub message and forward foreign key changes."""
        try:
            payload = json.loads(message["data"])
            key = payload["key"]
            origin = payload.get("origin")
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed storage event", data=message.get("data"))
            return
        if origin == self._origin:
            return
        for handler in list(self._handlers):
            try:
                handler(key)
            except Exception:
                logger.exception("Storage event handler failed", key=key)
