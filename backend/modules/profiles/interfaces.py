"""
Profile module interface.

The auth flow depends on IProfileStore for pre-existence checks and for
writing the profile once sign-up is verified.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import Profile


@runtime_checkable
class IProfileStore(Protocol):
    """
    Interface for profile persistence.

    Implementations raise TransportError when the store cannot be reached.
    """

    async def upsert_profile(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        """
        Create or update the profile for an identity.

        Args:
            profile_id: Identity ID the profile belongs to
            fields: Columns to write (email, first_name, ...)

        Returns:
            The stored profile
        """
        ...

    async def get_profile(self, profile_id: str) -> Optional[Profile]:
        """Get a profile by identity ID, or None."""
        ...

    async def find_profile_by_email(self, email: str) -> Optional[Profile]:
        """Get the profile registered with an email, or None."""
        ...
