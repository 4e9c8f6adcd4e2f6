"""Unified provider for the OpenAI-compatible chat APIs.

Groq serves the companion model in production; OpenAI and a local
Ollama server are interchangeable through the same client.
"""

from dataclasses import dataclass

from langchain_openai import ChatOpenAI

from .base import LLMProvider, ModelConfig


@dataclass
class ProviderConfig:
    """Configuration for an OpenAI-compatible provider.

    Attributes:
        default_base_url: Default API endpoint URL (None uses OpenAI's default)
        api_key_required: Whether an API key must be provided
        api_key_env_var: Environment variable name for the API key (for error messages)
    """

    default_base_url: str | None = None
    api_key_required: bool = True
    api_key_env_var: str = ""


# Provider configurations registry
PROVIDER_CONFIGS: dict[str, ProviderConfig] = {
    "groq": ProviderConfig(
        default_base_url="https://api.groq.com/openai/v1",
        api_key_required=True,
        api_key_env_var="GROQ_API_KEY",
    ),
    "openai": ProviderConfig(
        api_key_required=True,
        api_key_env_var="OPENAI_API_KEY",
    ),
    "ollama": ProviderConfig(
        default_base_url="http://localhost:11434/v1",
        api_key_required=False,
    ),
}


class OpenAICompatibleProvider(LLMProvider):
    """ChatOpenAI-backed provider for groq, openai and ollama.

    Cloud providers require an API key; the local server does not.
    """

    def __init__(self, provider_type: str):
        """Initialize the provider.

        Args:
            provider_type: One of: groq, openai, ollama

        Raises:
            KeyError: If provider_type is not recognized
        """
        if provider_type not in PROVIDER_CONFIGS:
            raise KeyError(
                f"Unknown provider type: {provider_type}. "
                f"Valid types: {list(PROVIDER_CONFIGS.keys())}"
            )
        self.provider_type = provider_type
        self.provider_config = PROVIDER_CONFIGS[provider_type]

    def get_llm(self, config: ModelConfig) -> ChatOpenAI:
        """Return a ChatOpenAI client configured for this provider.

        Raises:
            ValueError: If api_key is required but not provided
        """
        if self.provider_config.api_key_required and not config.api_key:
            raise ValueError(
                f"{self.provider_type.title()} API key is required. "
                f"Set it via the {self.provider_config.api_key_env_var} environment variable."
            )

        kwargs: dict = {
            "model": config.model_id,
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }

        if base_url := (config.api_base or self.provider_config.default_base_url):
            kwargs["base_url"] = base_url

        # Local servers accept any key
        kwargs["api_key"] = config.api_key or "not-needed"

        return ChatOpenAI(**kwargs)
