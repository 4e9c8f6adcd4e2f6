"""
Centralized configuration for the Mira backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, GROQ_*, OTP_*).
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Mira API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8080"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""

    # Frontend URLs (for redirects)
    frontend_url: str = "http://localhost:5173"
    oauth_redirect_path: str = "/chatbot"
    password_reset_redirect_path: str = "/auth"

    # Verification
    otp_validity_seconds: int = 300
    otp_resend_cooldown_seconds: int = 300
    gateway_timeout_seconds: float = 30.0
    pending_profile_ttl_seconds: int = 86400

    # Chat endpoint (consumed by the orchestrator)
    chat_api_url: str = "http://localhost:8000/api/chat"
    chat_request_timeout_seconds: float = 30.0
    chat_history_limit: int = 10

    # LLM (Groq, OpenAI-compatible)
    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    chat_model: str = "llama3-70b-8192"
    chat_max_tokens: int = 256
    chat_temperature: float = 1.2

    @property
    def oauth_redirect_url(self) -> str:
        """Where the OAuth provider sends the user back to."""
        return f"{self.frontend_url.rstrip('/')}{self.oauth_redirect_path}"

    @property
    def password_reset_redirect_url(self) -> str:
        """Link target embedded in password reset emails."""
        return f"{self.frontend_url.rstrip('/')}{self.password_reset_redirect_path}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
