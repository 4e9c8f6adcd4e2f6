"""
Chat module interfaces.

IChatEndpoint is what the client-side orchestrator consumes: the remote
chat-completion endpoint. IChatService is the server-side implementation
of that endpoint, used by the API routes.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthSession

from .models import (
    ChatReply,
    ChatRequest,
    ChatSession,
    ChatSessionDetail,
    Message,
)


@runtime_checkable
class IChatEndpoint(Protocol):
    """
    Interface for the remote chat endpoint.

    Every call is made on behalf of an established session.
    """

    async def send(self, session: AuthSession, request: ChatRequest) -> ChatReply:
        """
        Send a user message and get the assistant reply.

        Raises:
            ChatSessionNotFoundError: If request.session_id is unknown
            TransportError: If the endpoint cannot be reached
        """
        ...

    async def create_session(self, session: AuthSession) -> ChatSession:
        """Create an empty conversation."""
        ...

    async def list_sessions(self, session: AuthSession) -> list[ChatSession]:
        """List the caller's conversations."""
        ...

    async def get_session(self, session: AuthSession, session_id: str) -> list[Message]:
        """
        Get the stored history of a conversation.

        Raises:
            ChatSessionNotFoundError: If it does not exist for this caller
        """
        ...


@runtime_checkable
class IChatService(Protocol):
    """Interface for the server-side chat operations."""

    async def create_session(self, user_id: str) -> ChatSession:
        """Create a conversation seeded with the persona prompt."""
        ...

    async def send_message(self, user_id: str, request: ChatRequest) -> ChatReply:
        """
        Store a user message, get the assistant reply and store it too.

        Creates the session when request.session_id is empty.
        """
        ...

    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        """List sessions, most recently updated first."""
        ...

    async def get_session(self, user_id: str, session_id: str) -> ChatSessionDetail:
        """
        Get a session with its full stored history.

        Raises:
            ChatSessionNotFoundError: If missing or owned by another user
        """
        ...
