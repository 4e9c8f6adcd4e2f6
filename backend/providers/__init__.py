"""LLM provider implementations."""

from .base import LLMProvider, ModelConfig
from .factory import get_chat_llm, get_model_config, parse_model_string
from .openai_compatible import PROVIDER_CONFIGS, OpenAICompatibleProvider

__all__ = [
    "LLMProvider",
    "ModelConfig",
    "OpenAICompatibleProvider",
    "PROVIDER_CONFIGS",
    "get_chat_llm",
    "get_model_config",
    "parse_model_string",
]
