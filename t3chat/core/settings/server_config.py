"""Server configuration."""

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Server settings."""

    host: str
    port: int
    rate_limit: str
    stream_chunk_delay_ms: int

    @property
    def stream_chunk_delay_seconds(self) -> float:
        """Pause between streamed events in seconds."""
        return self.stream_chunk_delay_ms / 1000
