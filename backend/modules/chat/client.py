"""
HTTP client for the chat endpoint.
"""

import logging
from typing import Any, Optional

import httpx

from shared.config import get_settings
from shared.exceptions import TransportError
from shared.models import AuthSession

from .exceptions import ChatRequestFailedError, ChatSessionNotFoundError
from .interfaces import IChatEndpoint
from .models import (
    ChatReply,
    ChatRequest,
    ChatSession,
    Message,
    SessionDetailResponse,
    SessionListResponse,
)

logger = logging.getLogger(__name__)

CHAT_SERVICE = "chat-endpoint"


class HttpChatEndpoint(IChatEndpoint):
    """
    Talks to the `/api/chat` routes with the session's access token.

    A transport can be injected for testing (e.g. httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.chat_api_url).rstrip("/")
        self._timeout = (
            timeout_seconds if timeout_seconds is not None
            else settings.chat_request_timeout_seconds
        )
        self._transport = transport

    async def send(self, session: AuthSession, request: ChatRequest) -> ChatReply:
        data = await self._request(
            "POST",
            "/messages",
            session,
            json=request.model_dump(mode="json"),
            session_id=request.session_id,
        )
        return ChatReply(**data)

    async def create_session(self, session: AuthSession) -> ChatSession:
        data = await self._request("POST", "/sessions", session)
        return ChatSession(**data)

    async def list_sessions(self, session: AuthSession) -> list[ChatSession]:
        data = await self._request("GET", "/sessions", session)
        return SessionListResponse(**data).sessions

    async def get_session(self, session: AuthSession, session_id: str) -> list[Message]:
        data = await self._request(
            "GET", f"/sessions/{session_id}", session, session_id=session_id
        )
        return SessionDetailResponse(**data).session.chat_history

    async def _request(
        self,
        method: str,
        path: str,
        session: AuthSession,
        json: Optional[dict[str, Any]] = None,
        session_id: Optional[str] = None,
    ) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, headers=headers, json=json)
        except httpx.TimeoutException:
            logger.warning(f"Chat request timed out: {method} {path}")
            raise TransportError(
                CHAT_SERVICE,
                "The request timed out. Please check your connection and try again.",
            )
        except httpx.HTTPError as e:
            logger.warning(f"Chat request failed: {method} {path}: {e}")
            raise TransportError(CHAT_SERVICE)

        if response.status_code == 404 and session_id:
            raise ChatSessionNotFoundError(session_id)
        if response.is_error:
            raise ChatRequestFailedError(
                _error_message(response),
                status_code=response.status_code,
            )
        return response.json()


def _error_message(response: httpx.Response) -> str:
    """Pull the message out of an error body, falling back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
        detail = body.get("detail")
        if not message and isinstance(detail, str):
            message = detail
        elif not message and isinstance(detail, dict):
            message = detail.get("message")
        if message:
            return message
    return f"Chat request failed with status {response.status_code}"
