"""Tests for the unified OpenAI-compatible provider.

This module tests the OpenAICompatibleProvider which handles:
- Cloud providers: groq, openai (require API keys)
- Local provider: ollama (no API key required)
"""

import pytest
from unittest.mock import patch, MagicMock

from providers.openai_compatible import (
    OpenAICompatibleProvider,
    PROVIDER_CONFIGS,
    ProviderConfig,
)
from providers.base import ModelConfig


# =============================================================================
# Unit Tests - Parameterized across all provider types
# =============================================================================


class TestOpenAICompatibleProviderInstantiation:
    """Test provider instantiation for all types."""

    @pytest.mark.parametrize("provider_type", list(PROVIDER_CONFIGS.keys()))
    def test_provider_instantiation(self, provider_type):
        """All provider types should instantiate without errors."""
        provider = OpenAICompatibleProvider(provider_type)
        assert provider.provider_type == provider_type
        assert provider.provider_config == PROVIDER_CONFIGS[provider_type]

    def test_unknown_provider_raises_error(self):
        """Should raise KeyError for unknown provider type."""
        with pytest.raises(KeyError, match="Unknown provider type"):
            OpenAICompatibleProvider("unknown_provider")


class TestProviderConfigs:

    def test_groq_config(self):
        config = PROVIDER_CONFIGS["groq"]
        assert config.default_base_url == "https://api.groq.com/openai/v1"
        assert config.api_key_required is True
        assert config.api_key_env_var == "GROQ_API_KEY"

    def test_defaults(self):
        config = ProviderConfig()
        assert config.default_base_url is None
        assert config.api_key_required is True


class TestAPIKeyValidation:
    """Test API key validation for providers that require it."""

    @pytest.mark.parametrize(
        "provider_type,env_var",
        [
            ("groq", "GROQ_API_KEY"),
            ("openai", "OPENAI_API_KEY"),
        ],
    )
    def test_api_key_required(self, provider_type, env_var):
        """Cloud providers should raise ValueError naming the env var."""
        provider = OpenAICompatibleProvider(provider_type)
        config = ModelConfig(provider_type=provider_type, model_id="test-model-id")

        with pytest.raises(ValueError, match="API key is required") as exc_info:
            provider.get_llm(config)

        assert env_var in str(exc_info.value)

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_local_provider_no_api_key_required(self, mock_chat_openai):
        """Ollama should work without API key."""
        mock_chat_openai.return_value = MagicMock()

        provider = OpenAICompatibleProvider("ollama")
        llm = provider.get_llm(ModelConfig(provider_type="ollama", model_id="llama3"))

        assert llm is mock_chat_openai.return_value
        assert mock_chat_openai.call_args.kwargs["api_key"] == "not-needed"


class TestChatOpenAIConfiguration:
    """Test that ChatOpenAI is configured correctly for each provider."""

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_groq_configuration(self, mock_chat_openai):
        """Groq should use its OpenAI-compatible base URL."""
        provider = OpenAICompatibleProvider("groq")
        config = ModelConfig(
            provider_type="groq",
            model_id="llama3-70b-8192",
            api_key="gsk-test-key",
        )

        provider.get_llm(config)

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["model"] == "llama3-70b-8192"
        assert call_kwargs["base_url"] == "https://api.groq.com/openai/v1"
        assert call_kwargs["api_key"] == "gsk-test-key"
        assert call_kwargs["max_tokens"] == 256
        assert call_kwargs["temperature"] == 1.2

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_openai_configuration(self, mock_chat_openai):
        """OpenAI should be configured without base_url (uses default)."""
        provider = OpenAICompatibleProvider("openai")
        config = ModelConfig(provider_type="openai", model_id="gpt-4o", api_key="sk-test-key")

        provider.get_llm(config)

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o"
        assert "base_url" not in call_kwargs

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_custom_base_url_overrides_default(self, mock_chat_openai):
        """Custom api_base in config should override provider default."""
        provider = OpenAICompatibleProvider("groq")
        config = ModelConfig(
            provider_type="groq",
            model_id="llama3-70b-8192",
            api_base="https://proxy.example.com/v1",
            api_key="gsk-test-key",
        )

        provider.get_llm(config)

        assert mock_chat_openai.call_args.kwargs["base_url"] == "https://proxy.example.com/v1"

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_sampling_settings_passed_through(self, mock_chat_openai):
        provider = OpenAICompatibleProvider("groq")
        config = ModelConfig(
            provider_type="groq",
            model_id="llama3-8b-8192",
            api_key="gsk-test-key",
            max_tokens=512,
            temperature=0.3,
        )

        provider.get_llm(config)

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["max_tokens"] == 512
        assert call_kwargs["temperature"] == 0.3
