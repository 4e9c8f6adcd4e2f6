"""
Client-side chat orchestration.

Holds the current conversation for one signed-in user: the visible
message list, the active session pointer and the in-flight send.

A send appends the user message and an empty assistant placeholder right
away, then fills the placeholder in when the reply arrives. Cancelling a
send (explicitly, by sending again, or by switching conversations) removes
the placeholder and is not reported as an error.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from shared.config import get_settings
from shared.exceptions import MiraError
from shared.models import AuthSession
from modules.auth.exceptions import AuthenticationRequiredError, FieldValidationError
from modules.auth.interfaces import IIdentityGateway

from .exceptions import ChatSessionNotFoundError
from .interfaces import IChatEndpoint
from .models import (
    ChatReply,
    ChatRequest,
    ChatSession,
    Message,
    MessageRole,
    recent_history,
    visible_messages,
)

logger = logging.getLogger(__name__)


@dataclass
class CancellationToken:
    """Marks a send as cancelled on purpose."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ChatOrchestrator:
    """
    Conversation state and request lifecycle for one signed-in user.

    Session creation is lazy and shared: concurrent sends in an
    un-sessioned conversation await the same creation task, so at most
    one session is created per conversation.
    """

    def __init__(
        self,
        endpoint: IChatEndpoint,
        gateway: IIdentityGateway,
        history_limit: Optional[int] = None,
    ):
        self._endpoint = endpoint
        self._gateway = gateway
        self._history_limit = (
            history_limit if history_limit is not None
            else get_settings().chat_history_limit
        )

        self._messages: list[Message] = []
        self._session_id: Optional[str] = None
        self._sessions: list[ChatSession] = []
        self._error: Optional[MiraError] = None

        # Bumped whenever the conversation is switched or cleared
        self._generation = 0
        self._create_task: Optional[asyncio.Task] = None
        self._send_task: Optional[asyncio.Task] = None
        self._token: Optional[CancellationToken] = None
        self._loading_sessions = 0

    # =========================================================================
    # State
    # =========================================================================

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def current_session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def sessions(self) -> list[ChatSession]:
        return list(self._sessions)

    @property
    def is_loading(self) -> bool:
        sending = self._send_task is not None and not self._send_task.done()
        return sending or self._loading_sessions > 0

    @property
    def error(self) -> Optional[MiraError]:
        return self._error

    # =========================================================================
    # Operations
    # =========================================================================

    async def send_message(self, text: str) -> Optional[ChatReply]:
        """
        Send a user message in the current conversation.

        Returns:
            The reply, or None if the send was cancelled

        Raises:
            AuthenticationRequiredError: If no session is established
            FieldValidationError: If the message is blank
            ChatSessionNotFoundError / TransportError: On endpoint failures
        """
        text = text.strip()
        if not text:
            raise FieldValidationError("message", "Message cannot be empty")
        session = await self._require_session()

        previous = self._send_task
        self.cancel()
        if previous is not None and not previous.done():
            await asyncio.wait([previous])

        token = CancellationToken()
        task = asyncio.ensure_future(self._send(session, text, token))
        self._send_task = task
        self._token = token
        try:
            return await task
        except asyncio.CancelledError:
            if token.cancelled:
                logger.debug("Chat send cancelled")
                return None
            raise
        finally:
            if self._send_task is task:
                self._send_task = None
                self._token = None

    def cancel(self) -> None:
        """Cancel the in-flight send, if any."""
        if self._token is not None:
            self._token.cancel()
        if self._send_task is not None and not self._send_task.done():
            self._send_task.cancel()

    def start_new_session(self) -> None:
        """Start an empty, un-sessioned conversation."""
        self.cancel()
        self._reset_conversation()

    async def load_session(self, session_id: str) -> list[Message]:
        """
        Switch to a stored conversation.

        Raises:
            ChatSessionNotFoundError: If it does not exist for this user;
                the conversation is left empty and un-sessioned
        """
        session = await self._require_session()
        self.cancel()
        self._reset_conversation()
        generation = self._generation

        self._loading_sessions += 1
        try:
            history = await self._endpoint.get_session(session, session_id)
        except ChatSessionNotFoundError as e:
            logger.info(f"Chat session {session_id} not found")
            if generation == self._generation:
                self._reset_conversation()
                self._error = e
            raise
        except MiraError as e:
            if generation == self._generation:
                self._error = e
            raise
        finally:
            self._loading_sessions -= 1

        if generation == self._generation:
            self._messages = visible_messages(history)
            self._session_id = session_id
        return visible_messages(history)

    async def fetch_sessions(self) -> list[ChatSession]:
        """List the user's sessions, most recently updated first."""
        session = await self._require_session()
        self._loading_sessions += 1
        try:
            sessions = await self._endpoint.list_sessions(session)
        except MiraError as e:
            self._error = e
            raise
        finally:
            self._loading_sessions -= 1

        self._sessions = sorted(sessions, key=lambda s: s.updated_at, reverse=True)
        return list(self._sessions)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _require_session(self) -> AuthSession:
        session = await self._gateway.get_session()
        if session is None:
            raise AuthenticationRequiredError()
        return session

    def _reset_conversation(self) -> None:
        self._generation += 1
        self._messages = []
        self._session_id = None
        self._create_task = None
        self._error = None

    async def _send(
        self,
        session: AuthSession,
        text: str,
        token: CancellationToken,
    ) -> ChatReply:
        # History is taken before the new turn is appended
        history = recent_history(self._messages, self._history_limit)
        placeholder = Message(role=MessageRole.ASSISTANT, content="")
        self._messages.append(Message(role=MessageRole.USER, content=text))
        self._messages.append(placeholder)
        self._error = None

        try:
            session_id = await self._ensure_session(session)
            reply = await self._endpoint.send(
                session,
                ChatRequest(
                    session_id=session_id,
                    message=text,
                    recent_history=history,
                ),
            )
        except asyncio.CancelledError:
            self._remove(placeholder)
            raise
        except MiraError as e:
            self._remove(placeholder)
            if not token.cancelled:
                self._error = e
            raise

        if token.cancelled:
            self._remove(placeholder)
            raise asyncio.CancelledError()

        index = self._index_of(placeholder)
        if index is not None:
            self._messages[index] = Message(role=MessageRole.ASSISTANT, content=reply.message)
            self._session_id = reply.session_id
        return reply

    async def _ensure_session(self, session: AuthSession) -> str:
        if self._session_id is not None:
            return self._session_id
        if self._create_task is None:
            self._create_task = asyncio.ensure_future(
                self._create_session(session, self._generation)
            )
            self._create_task.add_done_callback(_log_creation_failure)
        # Shielded so a cancelled send does not abort a creation others await
        return await asyncio.shield(self._create_task)

    async def _create_session(self, session: AuthSession, generation: int) -> str:
        try:
            created = await self._endpoint.create_session(session)
        except Exception:
            if generation == self._generation:
                self._create_task = None
            raise

        logger.info(f"Created chat session {created.id}")
        if generation == self._generation:
            self._session_id = created.id
            self._sessions.insert(0, created)
        return created.id

    def _index_of(self, message: Message) -> Optional[int]:
        for i, m in enumerate(self._messages):
            if m is message:
                return i
        return None

    def _remove(self, message: Message) -> None:
        index = self._index_of(message)
        if index is not None:
            del self._messages[index]


def _log_creation_failure(task: asyncio.Task) -> None:
    # Retrieves the error even when every send awaiting the creation was cancelled
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning(f"Chat session creation failed: {error}")
