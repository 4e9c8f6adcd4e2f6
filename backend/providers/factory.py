"""Factory functions for creating LLM providers."""

from typing import Optional

from langchain_openai import ChatOpenAI

from shared.config import Settings, get_settings

from .base import ModelConfig
from .openai_compatible import OpenAICompatibleProvider


def parse_model_string(model: str, default_provider: str = "groq") -> tuple[str, str]:
    """Parse 'provider/model_id' into (provider_type, model_id).

    A bare model id is served by `default_provider`. Only the first '/'
    separates the provider, so ids like "ollama/library/llama3" keep
    their own slashes.

    Raises:
        ValueError: If the provider or model id is empty
    """
    if "/" not in model:
        provider_type, model_id = default_provider, model
    else:
        provider_type, model_id = model.split("/", 1)
    if not provider_type or not model_id:
        raise ValueError(
            f"Invalid model string '{model}'. "
            "Expected 'model_id' or 'provider/model_id' (e.g., 'groq/llama3-70b-8192')"
        )
    return provider_type, model_id


def get_model_config(settings: Optional[Settings] = None) -> ModelConfig:
    """Build the chat model configuration from settings."""
    settings = settings or get_settings()
    provider_type, model_id = parse_model_string(settings.chat_model)
    is_groq = provider_type == "groq"
    return ModelConfig(
        provider_type=provider_type,
        model_id=model_id,
        api_base=settings.groq_base_url if is_groq else "",
        api_key=settings.groq_api_key if is_groq else "",
        max_tokens=settings.chat_max_tokens,
        temperature=settings.chat_temperature,
    )


def get_chat_llm(settings: Optional[Settings] = None) -> ChatOpenAI:
    """Return the chat completion client described by settings.

    Raises:
        KeyError: If the provider is not recognized
        ValueError: If the provider needs an API key and none is set
    """
    config = get_model_config(settings)
    return OpenAICompatibleProvider(config.provider_type).get_llm(config)
