"""
Shared infrastructure for Mira backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factories
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import (
    create_supabase_auth_client,
    get_supabase_client,
    get_supabase_user_client,
    reset_client_cache,
)
from .exceptions import (
    MiraError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    TransportError,
)
from .models import AuthenticatedUser, AuthSession

__all__ = [
    "Settings",
    "get_settings",
    "create_supabase_auth_client",
    "get_supabase_client",
    "get_supabase_user_client",
    "reset_client_cache",
    "MiraError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "TransportError",
    "AuthenticatedUser",
    "AuthSession",
]
