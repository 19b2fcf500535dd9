"""Domain-specific configuration models."""

from t3chat.core.settings.app_config import AppConfig
from t3chat.core.settings.client_config import ClientConfig
from t3chat.core.settings.llm_config import LLMConfig
from t3chat.core.settings.server_config import ServerConfig
from t3chat.core.settings.storage_config import StorageConfig

__all__ = [
    "AppConfig",
    "ClientConfig",
    "LLMConfig",
    "ServerConfig",
    "StorageConfig",
]
