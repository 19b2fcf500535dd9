"""Chat client configuration."""

from pydantic import BaseModel


class ClientConfig(BaseModel, frozen=True):
    """Settings used by the chat client to reach the streaming endpoint."""

    api_base_url: str
    stream_path: str
    timeout_seconds: float

    @property
    def stream_url(self) -> str:
        """Absolute URL of the streaming chat endpoint."""
        return f"{self.api_base_url.rstrip('/')}{self.stream_path}"
