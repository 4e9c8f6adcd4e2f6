"""
Profile repository backed by the Supabase `profiles` table.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx
from supabase import Client, PostgrestAPIError

from shared.exceptions import TransportError
from shared.repository import BaseRepository

from .interfaces import IProfileStore
from .models import Profile

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = ("email", "first_name", "last_name", "date_of_birth")
STORE_SERVICE = "profiles"


class SupabaseProfileStore(BaseRepository[Profile], IProfileStore):
    """
    Profile store on the `profiles` table.

    Rows are upserted on `id`; only known profile columns are written.
    Profiles are never deleted here.

    Queries run in a worker thread so callers can bound them with a
    timeout; query and network failures surface as TransportError.
    """

    TABLE = "profiles"

    def __init__(self, db: Client) -> None:
        super().__init__(db)

    async def upsert_profile(self, profile_id: str, fields: dict[str, Any]) -> Profile:
        data: dict[str, Any] = {
            key: value for key, value in fields.items() if key in PROFILE_COLUMNS
        }
        data["id"] = profile_id
        data.setdefault("email", "")
        data["updated_at"] = self._now()

        result = await self._execute(
            self._db.table(self.TABLE).upsert(data, on_conflict="id")
        )
        logger.debug(f"Upserted profile {profile_id}")
        return self._map_to_profile(result.data[0])

    async def get_profile(self, profile_id: str) -> Optional[Profile]:
        result = await self._execute(
            self._db.table(self.TABLE).select("*").eq("id", profile_id)
        )
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    async def find_profile_by_email(self, email: str) -> Optional[Profile]:
        result = await self._execute(
            self._db.table(self.TABLE)
            .select("*")
            .eq("email", email)
            .limit(1)
        )
        if not result.data:
            return None
        return self._map_to_profile(result.data[0])

    async def _execute(self, query: Any) -> Any:
        try:
            return await asyncio.to_thread(query.execute)
        except PostgrestAPIError as e:
            logger.warning(f"Profile query rejected: {e.message}")
            raise TransportError(STORE_SERVICE, e.message or "Profile query failed")
        except httpx.HTTPError as e:
            logger.warning(f"Profile query failed: {e}")
            raise TransportError(STORE_SERVICE, str(e) or "Network request failed")

    def _map_to_profile(self, data: dict) -> Profile:
        """Map database row to Profile model."""
        return Profile(
            id=str(data["id"]),
            email=data.get("email") or "",
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            date_of_birth=data.get("date_of_birth"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
