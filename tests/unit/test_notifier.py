"""Unit tests for change notification and storage announcements."""

import json

import fakeredis

from t3chat.client.notifier import SessionChangeBus, StorageEventListener
from t3chat.client.storage import RedisStorage
from t3chat.core.settings import StorageConfig


class TestSessionChangeBus:
    """In-process publish/subscribe."""

    def test_publish_reaches_every_subscriber(self) -> None:
        bus = SessionChangeBus()
        calls: list[str] = []
        bus.subscribe(lambda: calls.append("a"))
        bus.subscribe(lambda: calls.append("b"))

        bus.publish()

        assert calls == ["a", "b"]

    def test_unsubscribe_stops_delivery(self) -> None:
        bus = SessionChangeBus()
        calls: list[None] = []
        unsubscribe = bus.subscribe(lambda: calls.append(None))

        unsubscribe()
        unsubscribe()
        bus.publish()

        assert calls == []
        assert len(bus) == 0

    def test_failing_subscriber_does_not_block_others(self) -> None:
        bus = SessionChangeBus()
        calls: list[None] = []

        def _broken() -> None:
            raise RuntimeError("render failed")

        bus.subscribe(_broken)
        bus.subscribe(lambda: calls.append(None))

        bus.publish()

        assert len(calls) == 1


class TestStorageAnnouncements:
    """RedisStorage announces changed keys on the change channel."""

    def test_set_publishes_key_and_origin(
        self, fake_redis: fakeredis.FakeRedis, storage: RedisStorage
    ) -> None:
        pubsub = fake_redis.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(storage.change_channel)
        pubsub.get_message(timeout=0.1)

        storage.set("chatSessions", "[]")
        message = pubsub.get_message(timeout=1.0)

        assert message is not None
        assert json.loads(message["data"]) == {
            "key": "chatSessions",
            "origin": "test-origin",
        }
        pubsub.close()

    def test_values_are_namespaced(
        self, fake_redis: fakeredis.FakeRedis, storage: RedisStorage
    ) -> None:
        storage.set("chatSessions", "[]")

        assert fake_redis.get("t3chat:chatSessions") == "[]"
        assert fake_redis.get("chatSessions") is None

    def test_pop_reads_and_removes(self, storage: RedisStorage) -> None:
        storage.set("pendingMessage", "hello")

        assert storage.pop("pendingMessage") == "hello"
        assert storage.get("pendingMessage") is None
        assert storage.pop("pendingMessage") is None


class TestStorageEventListener:
    """Cross-process storage events."""

    def _listener(
        self, fake_redis: fakeredis.FakeRedis, received: list[str]
    ) -> StorageEventListener:
        listener = StorageEventListener(fake_redis, "t3chat:storage", origin="me")
        listener.subscribe(received.append)
        return listener

    def test_foreign_change_is_forwarded(self, fake_redis: fakeredis.FakeRedis) -> None:
        received: list[str] = []
        listener = self._listener(fake_redis, received)

        listener.handle_message(
            {"data": json.dumps({"key": "chatSessions", "origin": "other"})}
        )

        assert received == ["chatSessions"]

    def test_own_change_is_ignored(self, fake_redis: fakeredis.FakeRedis) -> None:
        received: list[str] = []
        listener = self._listener(fake_redis, received)

        listener.handle_message(
            {"data": json.dumps({"key": "chatSessions", "origin": "me"})}
        )

        assert received == []

    def test_malformed_message_is_ignored(self, fake_redis: fakeredis.FakeRedis) -> None:
        received: list[str] = []
        listener = self._listener(fake_redis, received)

        listener.handle_message({"data": "not json"})
        listener.handle_message({"data": json.dumps({"origin": "other"})})

        assert received == []

    def test_poll_delivers_writes_from_other_origin(
        self, fake_redis: fakeredis.FakeRedis, storage_config: StorageConfig
    ) -> None:
        received: list[str] = []
        mine = RedisStorage(fake_redis, storage_config, origin="me")
        other = RedisStorage(fake_redis, storage_config, origin="other")
        listener = mine.events()
        listener.subscribe(received.append)
        listener.listen()

        mine.set("pendingMessage", "hi")
        other.set("chatSessions", "[]")
        other.delete("pendingMessage")
        listener.poll(timeout=1.0)

        assert received == ["chatSessions", "pendingMessage"]
        listener.close()

    def test_failing_handler_does_not_block_others(
        self, fake_redis: fakeredis.FakeRedis
    ) -> None:
        received: list[str] = []
        listener = StorageEventListener(fake_redis, "t3chat:storage", origin="me")

        def _broken(key: str) -> None:
            raise RuntimeError("render failed")

        listener.subscribe(_broken)
        unsubscribe = listener.subscribe(received.append)
        message = {"data": json.dumps({"key": "chatSessions", "origin": "other"})}

        listener.handle_message(message)
        unsubscribe()
        listener.handle_message(message)

        assert received == ["chatSessions"]
