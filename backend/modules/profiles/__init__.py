"""
Profiles module.

Persists the profile record that belongs to each identity.

Public API:
- IProfileStore: Interface for profile persistence
- Profile: Profile record
- SupabaseProfileStore: Implementation on the `profiles` table
"""

from .interfaces import IProfileStore
from .models import Profile
from .repository import SupabaseProfileStore

__all__ = [
    "IProfileStore",
    "Profile",
    "SupabaseProfileStore",
]
