"""Tests for the chat API endpoints."""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from api import app
from api.dependencies import get_auth_service, get_chat_service
from modules.auth.service import AuthService
from modules.chat.exceptions import ChatSessionNotFoundError, CompletionProviderError
from modules.chat.models import (
    ChatReply,
    ChatSession,
    ChatSessionDetail,
    persona_message,
)


@pytest.fixture
def service():
    chat = MagicMock()
    chat.send_message = AsyncMock(return_value=ChatReply(message="Hi!", session_id="s-1"))
    chat.create_session = AsyncMock(return_value=ChatSession(id="s-1", title="New Session"))
    chat.list_sessions = AsyncMock(return_value=[ChatSession(id="s-1", title="New Session")])
    chat.get_session = AsyncMock(
        return_value=ChatSessionDetail(id="s-1", title="New Session", chat_history=[persona_message()])
    )
    return chat


@pytest.fixture
def client(service, jwt_secret):
    app.dependency_overrides[get_auth_service] = lambda: AuthService(jwt_secret=jwt_secret)
    app.dependency_overrides[get_chat_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSendMessage:
    def test_requires_auth(self, client, service):
        response = client.post("/api/chat/messages", json={"message": "hi"})
        assert response.status_code == 401
        service.send_message.assert_not_awaited()

    def test_reply(self, client, service, auth_headers, test_user_id):
        response = client.post(
            "/api/chat/messages",
            json={"message": "hi", "recent_history": [{"role": "user", "content": "earlier"}]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Hi!", "session_id": "s-1"}
        user_id, request = service.send_message.await_args.args
        assert user_id == test_user_id
        assert request.recent_history[0].content == "earlier"

    def test_empty_message(self, client, auth_headers):
        response = client.post("/api/chat/messages", json={"message": ""}, headers=auth_headers)
        assert response.status_code == 422

    def test_unknown_session(self, client, service, auth_headers):
        service.send_message.side_effect = ChatSessionNotFoundError("gone")
        response = client.post(
            "/api/chat/messages",
            json={"session_id": "gone", "message": "hi"},
            headers=auth_headers,
        )
        assert response.status_code == 404

    def test_provider_failure(self, client, service, auth_headers):
        service.send_message.side_effect = CompletionProviderError("groq", "Failed to get a reply")
        response = client.post("/api/chat/messages", json={"message": "hi"}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["error"] == "PROVIDER_ERROR"


class TestSessions:
    def test_create(self, client, auth_headers):
        response = client.post("/api/chat/sessions", headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["id"] == "s-1"

    def test_list(self, client, service, auth_headers, test_user_id):
        response = client.get("/api/chat/sessions", headers=auth_headers)

        assert response.status_code == 200
        assert [s["id"] for s in response.json()["sessions"]] == ["s-1"]
        service.list_sessions.assert_awaited_once_with(test_user_id)

    def test_get(self, client, service, auth_headers, test_user_id):
        response = client.get("/api/chat/sessions/s-1", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["session"]["chat_history"][0]["role"] == "system"
        service.get_session.assert_awaited_once_with(test_user_id, "s-1")

    def test_get_foreign_session(self, client, service, auth_headers):
        service.get_session.side_effect = ChatSessionNotFoundError("s-2")
        response = client.get("/api/chat/sessions/s-2", headers=auth_headers)
        assert response.status_code == 404
