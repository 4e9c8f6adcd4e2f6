"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService
    from modules.chat.interfaces import IChatService
    from modules.chat.repository import ChatSessionRepository
    from modules.profiles.interfaces import IProfileStore


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached within the
    container. Use reset() to clear them for testing.
    """

    def __init__(self) -> None:
        self._auth_service: "IAuthService | None" = None
        self._chat_service: "IChatService | None" = None
        self._chat_repository: "ChatSessionRepository | None" = None
        self._profile_store: "IProfileStore | None" = None

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService()
        return self._auth_service

    @property
    def chat_repository(self) -> "ChatSessionRepository":
        """Get the chat session repository instance."""
        if self._chat_repository is None:
            from modules.chat.repository import ChatSessionRepository
            from shared.database import get_supabase_client
            self._chat_repository = ChatSessionRepository(get_supabase_client())
        return self._chat_repository

    @property
    def chat(self) -> "IChatService":
        """Get the chat service instance."""
        if self._chat_service is None:
            from modules.chat.service import ChatService
            from shared.config import get_settings
            self._chat_service = ChatService(
                repository=self.chat_repository,
                history_limit=get_settings().chat_history_limit,
            )
        return self._chat_service

    @property
    def profiles(self) -> "IProfileStore":
        """Get the profile store instance."""
        if self._profile_store is None:
            from modules.profiles.repository import SupabaseProfileStore
            from shared.database import get_supabase_client
            self._profile_store = SupabaseProfileStore(get_supabase_client())
        return self._profile_store

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._auth_service = None
        self._chat_service = None
        self._chat_repository = None
        self._profile_store = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_chat_service() -> "IChatService":
    """FastAPI dependency for chat service."""
    return get_container().chat


def get_profile_store() -> "IProfileStore":
    """FastAPI dependency for the profile store."""
    return get_container().profiles
