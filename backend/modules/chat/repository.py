"""
Chat session repository for database access.

Encapsulates the Supabase queries for the `chat_sessions` table:
- id, user_id, session_name, chat_history (JSON list of {role, content}),
  created_at, updated_at
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from .models import ChatSession, ChatSessionDetail, Message


class ChatSessionRepository(BaseRepository[ChatSessionDetail]):
    """
    Repository for chat session data access.

    Every read and write is scoped to the owning user, so a session
    belonging to someone else looks exactly like a missing one.
    """

    TABLE = "chat_sessions"
    SUMMARY_COLUMNS = "id, session_name, created_at, updated_at"

    def create_session(
        self,
        user_id: str,
        title: str,
        chat_history: list[Message],
    ) -> ChatSessionDetail:
        """
        Insert a new session row.

        Returns:
            The created session with its generated ID and timestamps.
        """
        now = self._now()
        data = {
            "user_id": user_id,
            "session_name": title,
            "chat_history": self._dump_history(chat_history),
            "created_at": now,
            "updated_at": now,
        }
        result = self._db.table(self.TABLE).insert(data).execute()
        return self._map_to_detail(result.data[0])

    def get_session(self, session_id: str, user_id: str) -> Optional[ChatSessionDetail]:
        """Get a session with its history, or None if not found for this user."""
        result = (
            self._db.table(self.TABLE)
            .select("*")
            .eq("id", session_id)
            .eq("user_id", user_id)
            .execute()
        )
        if not result.data:
            return None
        return self._map_to_detail(result.data[0])

    def list_sessions(self, user_id: str) -> list[ChatSession]:
        """List a user's sessions, most recently updated first."""
        result = (
            self._db.table(self.TABLE)
            .select(self.SUMMARY_COLUMNS)
            .eq("user_id", user_id)
            .order("updated_at", desc=True)
            .execute()
        )
        return [self._map_to_session(row) for row in result.data]

    def update_session(
        self,
        session_id: str,
        user_id: str,
        chat_history: list[Message],
        title: Optional[str] = None,
    ) -> None:
        """Replace the stored history and optionally rename the session."""
        data: dict[str, Any] = {
            "chat_history": self._dump_history(chat_history),
            "updated_at": self._now(),
        }
        if title is not None:
            data["session_name"] = title

        (
            self._db.table(self.TABLE)
            .update(data)
            .eq("id", session_id)
            .eq("user_id", user_id)
            .execute()
        )

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _dump_history(messages: list[Message]) -> list[dict[str, str]]:
        return [m.model_dump(mode="json") for m in messages]

    def _map_to_session(self, data: dict) -> ChatSession:
        """Map database row to ChatSession model."""
        return ChatSession(
            id=str(data["id"]),
            title=data.get("session_name") or "",
            created_at=data["created_at"],
            updated_at=data.get("updated_at") or data["created_at"],
        )

    def _map_to_detail(self, data: dict) -> ChatSessionDetail:
        """Map database row to ChatSessionDetail model."""
        summary = self._map_to_session(data)
        return ChatSessionDetail(
            **summary.model_dump(),
            chat_history=[Message(**m) for m in data.get("chat_history") or []],
        )
