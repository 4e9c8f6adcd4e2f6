"""
Chat service implementation.

Server side of the chat endpoint: stores conversations in the
`chat_sessions` table and asks the hosted LLM for replies.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .exceptions import ChatSessionNotFoundError, CompletionProviderError
from .interfaces import IChatService
from .models import (
    RECENT_HISTORY_LIMIT,
    SESSION_TITLE_MAX_LENGTH,
    ChatReply,
    ChatRequest,
    ChatSession,
    ChatSessionDetail,
    Message,
    MessageRole,
    persona_message,
    recent_history,
)
from .repository import ChatSessionRepository

logger = logging.getLogger(__name__)

COMPLETION_SERVICE = "groq"


def default_session_title(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"New Session {now.isoformat()}"


def session_title_from(message: str) -> str:
    return message[:SESSION_TITLE_MAX_LENGTH]


class ChatService(IChatService):
    """
    Chat service with Supabase persistence and a LangChain chat model.

    The LLM context is the persona prompt, the client's recent history
    (system entries dropped, capped) and the new message. The stored
    history keeps every turn.
    """

    def __init__(
        self,
        repository: ChatSessionRepository,
        llm: Optional[BaseChatModel] = None,
        history_limit: int = RECENT_HISTORY_LIMIT,
    ):
        self._repository = repository
        self._llm = llm
        self._history_limit = history_limit

    async def create_session(self, user_id: str) -> ChatSession:
        detail = self._create(user_id)
        return ChatSession(**detail.model_dump(exclude={"chat_history"}))

    async def send_message(self, user_id: str, request: ChatRequest) -> ChatReply:
        if request.session_id:
            stored = self._repository.get_session(request.session_id, user_id)
            if stored is None:
                raise ChatSessionNotFoundError(request.session_id)
        else:
            stored = self._create(user_id)

        context = self._build_context(request)
        reply_text = await self._complete(context)

        is_first_exchange = not any(m.role == MessageRole.USER for m in stored.chat_history)
        history = stored.chat_history + [
            Message(role=MessageRole.USER, content=request.message),
            Message(role=MessageRole.ASSISTANT, content=reply_text),
        ]
        self._repository.update_session(
            stored.id,
            user_id,
            history,
            title=session_title_from(request.message) if is_first_exchange else None,
        )
        return ChatReply(message=reply_text, session_id=stored.id)

    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        sessions = self._repository.list_sessions(user_id)
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    async def get_session(self, user_id: str, session_id: str) -> ChatSessionDetail:
        stored = self._repository.get_session(session_id, user_id)
        if stored is None:
            raise ChatSessionNotFoundError(session_id)
        return stored

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _create(self, user_id: str) -> ChatSessionDetail:
        created = self._repository.create_session(
            user_id,
            default_session_title(),
            [persona_message()],
        )
        logger.info(f"Created chat session {created.id} for user {user_id}")
        return created

    def _build_context(self, request: ChatRequest) -> list[BaseMessage]:
        context: list[BaseMessage] = [SystemMessage(content=persona_message().content)]
        for message in recent_history(request.recent_history, self._history_limit):
            if message.role == MessageRole.USER:
                context.append(HumanMessage(content=message.content))
            else:
                context.append(AIMessage(content=message.content))
        context.append(HumanMessage(content=request.message))
        return context

    def _get_llm(self) -> BaseChatModel:
        if self._llm is None:
            from providers import get_chat_llm

            try:
                self._llm = get_chat_llm()
            except (KeyError, ValueError) as e:
                raise CompletionProviderError(
                    COMPLETION_SERVICE, "Chat model is not configured", str(e)
                )
        return self._llm

    async def _complete(self, context: list[BaseMessage]) -> str:
        llm = self._get_llm()
        try:
            response = await llm.ainvoke(context)
        except Exception as e:
            logger.error(f"Chat completion failed: {e}")
            raise CompletionProviderError(
                COMPLETION_SERVICE, "Failed to get a reply", str(e)
            )

        content = response.content
        if not isinstance(content, str) or not content:
            raise CompletionProviderError(COMPLETION_SERVICE, "Empty reply from model")
        return content


# Module-level instance getter
_service_instance: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """Get the chat service singleton."""
    global _service_instance
    if _service_instance is None:
        from shared.config import get_settings
        from shared.database import get_supabase_client

        _service_instance = ChatService(
            repository=ChatSessionRepository(get_supabase_client()),
            history_limit=get_settings().chat_history_limit,
        )
    return _service_instance


def reset_chat_service() -> None:
    """Reset the chat service singleton (for testing)."""
    global _service_instance
    _service_instance = None
