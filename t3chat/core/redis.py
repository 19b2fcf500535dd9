"""Redis client lifecycle for the client-side session storage."""

import redis

from t3chat.core.config import settings

redis_client: redis.Redis | None = None  # type: ignore[type-arg]


def init_redis(url: str | None = None) -> redis.Redis:  # type: ignore[type-arg]
    """Initialize the Redis connection."""
    global redis_client  # noqa: PLW0603
    redis_client = redis.Redis.from_url(
        url or settings.storage.redis_url, decode_responses=True
    )
    redis_client.ping()
    return redis_client


def close_redis() -> None:
    """Close the Redis connection."""
    global redis_client  # noqa: PLW0603
    if redis_client:
        redis_client.close()
        redis_client = None
