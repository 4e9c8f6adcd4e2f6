"""
Database client factory for Supabase.

Provides service-role clients (for backend operations bypassing RLS),
user-authenticated clients (for operations respecting RLS), and the
async anon client the identity gateway drives auth flows through.
"""

from typing import Optional
from supabase import create_client, acreate_client, AsyncClient, Client

from .config import get_settings

# Module-level client cache
_service_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Use this for backend operations that need full database access,
    such as persisting chat history on behalf of users.

    Returns:
        Supabase client configured with service role key
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY environment variables."
            )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_supabase_user_client(access_token: str) -> Client:
    """
    Get Supabase client authenticated as a specific user.

    Use this for operations that should respect Row Level Security (RLS),
    such as writing the profile row that belongs to the signed-in user.

    Args:
        access_token: JWT access token from Supabase Auth

    Returns:
        Supabase client configured with user's access token
    """
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
        )

    client = create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
    )
    # Set the session with the access token (refresh_token can be empty for backend use)
    client.auth.set_session(access_token, "")
    return client


async def create_supabase_auth_client() -> AsyncClient:
    """
    Create an async Supabase client with the anon key.

    Each auth flow owns its client: the session it holds is the
    session of the user going through that flow.
    """
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "Supabase configuration missing. "
            "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
        )
    return await acreate_client(settings.supabase_url, settings.supabase_anon_key)


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _service_client
    _service_client = None
