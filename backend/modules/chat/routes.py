"""
Chat API endpoints.

Every route acts on the caller's own sessions; a session owned by
someone else is reported as not found.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.middleware.auth import get_current_user
from api.dependencies import get_chat_service
from shared.models import AuthenticatedUser

from .interfaces import IChatService
from .models import (
    ChatReply,
    ChatRequest,
    ChatSession,
    SessionDetailResponse,
    SessionListResponse,
)
from .exceptions import ChatSessionNotFoundError

router = APIRouter()


@router.post("/messages", response_model=ChatReply)
async def send_message(
    request: ChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> ChatReply:
    """
    Send a message and get Mira's reply.

    Without a session_id a new session is created for the exchange.
    """
    try:
        return await service.send_message(user.id, request)
    except ChatSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")


@router.post("/sessions", response_model=ChatSession, status_code=201)
async def create_session(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> ChatSession:
    """Create an empty session."""
    return await service.create_session(user.id)


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> SessionListResponse:
    """List the current user's sessions, most recently updated first."""
    sessions = await service.list_sessions(user.id)
    return SessionListResponse(sessions=sessions)


@router.get("/sessions/{session_id}", response_model=SessionDetailResponse)
async def get_session(
    session_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> SessionDetailResponse:
    """Get a session with its full history."""
    try:
        session = await service.get_session(user.id, session_id)
    except ChatSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return SessionDetailResponse(session=session)
