import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from modules.chat.exceptions import ChatSessionNotFoundError, CompletionProviderError
from modules.chat.models import (
    SYSTEM_PROMPT,
    ChatRequest,
    ChatSession,
    ChatSessionDetail,
    Message,
    MessageRole,
    persona_message,
)
from modules.chat.service import (
    ChatService,
    default_session_title,
    get_chat_service,
    reset_chat_service,
    session_title_from,
)


def user(content: str) -> Message:
    return Message(role=MessageRole.USER, content=content)


def assistant(content: str) -> Message:
    return Message(role=MessageRole.ASSISTANT, content=content)


def stored_session(session_id: str = "session-1", history=None) -> ChatSessionDetail:
    return ChatSessionDetail(
        id=session_id,
        title="New Session",
        chat_history=history if history is not None else [persona_message()],
    )


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.create_session.return_value = stored_session("created-1")
    repo.get_session.return_value = stored_session()
    return repo


@pytest.fixture
def llm():
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="Hi, I'm Mira!"))
    return model


@pytest.fixture
def service(repository, llm):
    return ChatService(repository=repository, llm=llm, history_limit=4)


class TestTitles:
    def test_default_title(self):
        assert default_session_title().startswith("New Session ")

    def test_title_truncated(self):
        assert session_title_from("x" * 80) == "x" * 50
        assert session_title_from("short") == "short"


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_creates_session_without_id(self, service, repository):
        reply = await service.send_message("user-1", ChatRequest(message="hello"))

        assert reply.session_id == "created-1"
        assert reply.message == "Hi, I'm Mira!"
        user_id, title, history = repository.create_session.call_args.args
        assert user_id == "user-1"
        assert title.startswith("New Session")
        assert history == [persona_message()]

    @pytest.mark.asyncio
    async def test_uses_existing_session(self, service, repository):
        await service.send_message("user-1", ChatRequest(session_id="session-1", message="hello"))

        repository.get_session.assert_called_once_with("session-1", "user-1")
        repository.create_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_session(self, service, repository, llm):
        repository.get_session.return_value = None

        with pytest.raises(ChatSessionNotFoundError):
            await service.send_message("user-1", ChatRequest(session_id="nope", message="hello"))
        llm.ainvoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_context_is_persona_history_and_message(self, service, llm):
        request = ChatRequest(
            message="what now?",
            recent_history=[
                Message(role=MessageRole.SYSTEM, content="injected"),
                user("one"), assistant("two"), user("three"), assistant("four"), user("five"),
            ],
        )

        await service.send_message("user-1", request)

        context = llm.ainvoke.await_args.args[0]
        assert isinstance(context[0], SystemMessage)
        assert context[0].content == SYSTEM_PROMPT
        # Capped at the last four visible turns
        assert [m.content for m in context[1:-1]] == ["two", "three", "four", "five"]
        assert isinstance(context[1], AIMessage)
        assert isinstance(context[2], HumanMessage)
        assert isinstance(context[-1], HumanMessage)
        assert context[-1].content == "what now?"

    @pytest.mark.asyncio
    async def test_first_exchange_sets_title(self, service, repository):
        await service.send_message("user-1", ChatRequest(session_id="session-1", message="I feel anxious"))

        session_id, user_id, history = repository.update_session.call_args.args
        assert session_id == "session-1"
        assert user_id == "user-1"
        assert history == [persona_message(), user("I feel anxious"), assistant("Hi, I'm Mira!")]
        assert repository.update_session.call_args.kwargs["title"] == "I feel anxious"

    @pytest.mark.asyncio
    async def test_later_exchange_keeps_title(self, service, repository):
        repository.get_session.return_value = stored_session(
            history=[persona_message(), user("first"), assistant("reply")]
        )

        await service.send_message("user-1", ChatRequest(session_id="session-1", message="second"))

        assert repository.update_session.call_args.kwargs["title"] is None
        history = repository.update_session.call_args.args[2]
        assert len(history) == 5

    @pytest.mark.asyncio
    async def test_provider_failure(self, service, repository, llm):
        llm.ainvoke.side_effect = RuntimeError("rate limited")

        with pytest.raises(CompletionProviderError) as exc_info:
            await service.send_message("user-1", ChatRequest(session_id="session-1", message="hi"))

        assert exc_info.value.details["original_error"] == "rate limited"
        repository.update_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_reply(self, service, llm):
        llm.ainvoke.return_value = AIMessage(content="")

        with pytest.raises(CompletionProviderError):
            await service.send_message("user-1", ChatRequest(session_id="session-1", message="hi"))

    @pytest.mark.asyncio
    async def test_unconfigured_model(self, repository):
        service = ChatService(repository=repository)

        with patch("providers.get_chat_llm", side_effect=ValueError("API key not set")):
            with pytest.raises(CompletionProviderError):
                await service.send_message("user-1", ChatRequest(session_id="session-1", message="hi"))


class TestSessions:
    @pytest.mark.asyncio
    async def test_create_session(self, service, repository):
        session = await service.create_session("user-1")

        assert isinstance(session, ChatSession)
        assert not isinstance(session, ChatSessionDetail)
        assert session.id == "created-1"

    @pytest.mark.asyncio
    async def test_list_sorted_by_activity(self, service, repository):
        older = ChatSession(id="old", title="a", updated_at="2024-01-01T00:00:00+00:00")
        newer = ChatSession(id="new", title="b", updated_at="2024-02-01T00:00:00+00:00")
        repository.list_sessions.return_value = [older, newer]

        sessions = await service.list_sessions("user-1")

        assert [s.id for s in sessions] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_get_session(self, service):
        detail = await service.get_session("user-1", "session-1")
        assert detail.id == "session-1"

    @pytest.mark.asyncio
    async def test_get_foreign_session(self, service, repository):
        repository.get_session.return_value = None
        with pytest.raises(ChatSessionNotFoundError):
            await service.get_session("user-2", "session-1")


class TestSingleton:
    def test_get_chat_service_is_cached(self):
        with patch("shared.database.get_supabase_client", return_value=MagicMock()):
            first = get_chat_service()
            second = get_chat_service()
        assert first is second

    def test_reset(self):
        with patch("shared.database.get_supabase_client", return_value=MagicMock()):
            first = get_chat_service()
            reset_chat_service()
            assert get_chat_service() is not first
