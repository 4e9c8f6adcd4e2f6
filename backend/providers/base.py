"""Base classes and models for LLM providers."""

from abc import ABC, abstractmethod

from langchain_openai import ChatOpenAI
from pydantic import BaseModel


class ModelConfig(BaseModel):
    """Configuration for the chat completion model.

    Attributes:
        provider_type: Provider key (e.g., "groq")
        model_id: Model identifier (e.g., "llama3-70b-8192")
        api_base: Base URL for the API endpoint (empty uses the provider default)
        api_key: API key (empty string for local servers)
        max_tokens: Upper bound on reply length
        temperature: Sampling temperature
    """

    model_config = {"frozen": True}

    provider_type: str
    model_id: str
    api_base: str = ""
    api_key: str = ""
    max_tokens: int = 256
    temperature: float = 1.2


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Every supported provider exposes an OpenAI-compatible API, so
    implementations are thin wrappers around ChatOpenAI.
    """

    @abstractmethod
    def get_llm(self, config: ModelConfig) -> ChatOpenAI:
        """Return a configured LLM client for the given model.

        Args:
            config: Model configuration with provider details

        Returns:
            A configured ChatOpenAI client
        """
        pass
