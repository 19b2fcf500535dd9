"""Synchronous key-value storage backing the chat client.

Values are plain strings. Every write also announces the changed key on a
pub/sub channel so other processes sharing the same Redis can react, the
way browser tabs receive storage events.
"""

import json
import uuid

import redis

from t3chat.client.notifier import StorageEventListener
from t3chat.core.settings import StorageConfig


class RedisStorage:
    """String key-value store with change announcements."""

    def __init__(
        self,
        client: redis.Redis,  # type: ignore[type-arg]
        config: StorageConfig,
        origin: str | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self.origin = origin or uuid.uuid4().hex

    @property
    def change_channel(self) -> str:
        return self._config.change_channel

    def events(self) -> StorageEventListener:
        """Listener for changes written by other origins."""
        return StorageEventListener(self._client, self.change_channel, self.origin)

    def get(self, key: str) -> str | None:
        return self._client.get(self._config.qualified(key))

    def set(self, key: str, value: str) -> None:
        self._client.set(self._config.qualified(key), value)
        self._announce(key)

    def delete(self, key: str) -> None:
        self._client.delete(self._config.qualified(key))
        self._announce(key)

    def pop(self, key: str) -> str | None:
        """Read and remove a value in one round trip."""
        value = self._client.getdel(self._config.qualified(key))
        if value is not None:
            self._announce(key)
        return value

    def _announce(self, key: str) -> None:
        message = json.dumps({"key": key, "origin": self.origin})
        self._client.publish(self._config.change_channel, message)
