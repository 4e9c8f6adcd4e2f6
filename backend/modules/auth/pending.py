"""
Pending sign-up profiles.

Sign-up collects profile fields before the email is confirmed, but the
profile row may only be written once verification succeeds. Entries are
kept here, keyed by the identity ID the gateway returned, and expire after
a TTL so an abandoned sign-up does not linger forever.
"""

import logging
import time
from typing import Callable, Optional

from .models import SignUpProfile

logger = logging.getLogger(__name__)


class PendingProfileStore:
    """In-memory, TTL-evicting map of identity ID -> SignUpProfile."""

    DEFAULT_TTL_SECONDS = 86400  # 24 hours

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[SignUpProfile, float]] = {}

    def __len__(self) -> int:
        self.evict_expired()
        return len(self._entries)

    def __contains__(self, identity_id: str) -> bool:
        return self.get(identity_id) is not None

    def put(self, identity_id: str, profile: SignUpProfile) -> None:
        self.evict_expired()
        self._entries[identity_id] = (profile, self._clock() + self._ttl)

    def get(self, identity_id: str) -> Optional[SignUpProfile]:
        entry = self._entries.get(identity_id)
        if entry is None:
            return None
        profile, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[identity_id]
            logger.debug(f"Pending profile for {identity_id} expired")
            return None
        return profile

    def discard(self, identity_id: str) -> None:
        self._entries.pop(identity_id, None)

    def evict_expired(self) -> int:
        """Drop expired entries. Returns how many were dropped."""
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Evicted {len(expired)} unclaimed pending profile(s)")
        return len(expired)
