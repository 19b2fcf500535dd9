"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from t3chat.core.settings import (
    AppConfig,
    ClientConfig,
    LLMConfig,
    ServerConfig,
    StorageConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.provider).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: Literal["together", "openai", "anthropic"] = Field(
        default="together",
        description="LLM provider to use",
    )

    # Together (OpenAI-compatible endpoint)
    together_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Together API key",
    )
    together_model: str = Field(
        default="deepseek-ai/DeepSeek-V3",
        description="Together model name",
    )
    together_base_url: str = Field(
        default="https://api.together.xyz/v1",
        description="Together OpenAI-compatible base URL",
    )

    # OpenAI
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model name",
    )

    # Anthropic
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Anthropic model name",
    )

    # App
    app_name: str = Field(
        default="t3-chat",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8004,
        ge=1,
        le=65535,
        description="Server port",
    )
    rate_limit: str = Field(
        default="60/minute",
        description="Default rate limit per client address",
    )
    stream_chunk_delay_ms: int = Field(
        default=10,
        ge=0,
        le=1000,
        description="Pause after each streamed event in milliseconds",
    )

    # Storage
    storage_redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL backing the client session store",
    )
    storage_key_prefix: str = Field(
        default="t3chat:",
        description="Namespace prefix for storage keys",
    )
    storage_sessions_key: str = Field(
        default="chatSessions",
        description="Key holding the JSON array of chat sessions",
    )
    storage_pending_prompt_key: str = Field(
        default="pendingMessage",
        description="Key holding the prompt handed over to a new chat view",
    )
    storage_change_channel: str = Field(
        default="t3chat:storage",
        description="Pub/sub channel announcing storage key changes",
    )

    # Client
    client_api_base_url: str = Field(
        default="http://localhost:8004",
        description="Base URL of the streaming chat service",
    )
    client_stream_path: str = Field(
        default="/api/v1/chat/stream",
        description="Path of the streaming chat endpoint",
    )
    client_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="HTTP timeout for chat requests",
    )

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """LLM provider configuration."""
        return LLMConfig(
            provider=self.llm_provider,
            together_api_key=self.together_api_key,
            together_model=self.together_model,
            together_base_url=self.together_base_url,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            anthropic_api_key=self.anthropic_api_key,
            anthropic_model=self.anthropic_model,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            rate_limit=self.rate_limit,
            stream_chunk_delay_ms=self.stream_chunk_delay_ms,
        )

    @cached_property
    def storage(self) -> StorageConfig:
        """Client session storage configuration."""
        return StorageConfig(
            redis_url=self.storage_redis_url,
            key_prefix=self.storage_key_prefix,
            sessions_key=self.storage_sessions_key,
            pending_prompt_key=self.storage_pending_prompt_key,
            change_channel=self.storage_change_channel,
        )

    @cached_property
    def client(self) -> ClientConfig:
        """Chat client configuration."""
        return ClientConfig(
            api_base_url=self.client_api_base_url,
            stream_path=self.client_stream_path,
            timeout_seconds=self.client_timeout_seconds,
        )


# Global settings instance
settings = Settings()
