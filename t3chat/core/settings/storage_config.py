"""Client-side key-value storage configuration."""

from pydantic import BaseModel


class StorageConfig(BaseModel, frozen=True):
    """Where chat sessions and the pending prompt are persisted."""

    redis_url: str
    key_prefix: str
    sessions_key: str
    pending_prompt_key: str
    change_channel: str

    def qualified(self, key: str) -> str:
        """Return the namespaced storage key."""
        return f"{self.key_prefix}{key}"
