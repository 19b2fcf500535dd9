"""Global dependencies for the application."""

from functools import lru_cache

from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from t3chat.core.config import settings
from t3chat.services.completion_service import CompletionService


@lru_cache
def get_llm() -> BaseChatModel:
    """Get the LLM instance based on the configured provider."""
    llm_config = settings.llm
    match llm_config.provider:
        case "together":
            return ChatOpenAI(
                model=llm_config.together_model,
                api_key=llm_config.together_api_key,
                base_url=llm_config.together_base_url,
                streaming=True,
            )
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=llm_config.openai_api_key,
                streaming=True,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=llm_config.anthropic_api_key,
                streaming=True,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


def get_completion_service() -> CompletionService:
    """Get CompletionService bound to the configured model."""
    return CompletionService(get_llm())
