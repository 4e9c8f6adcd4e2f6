"""
Chat module.

Client side: ChatOrchestrator drives one user's conversation against the
chat endpoint (HttpChatEndpoint). Server side: ChatService implements
that endpoint over Supabase and the hosted LLM.

Public API:
- ChatOrchestrator: Conversation state, sends and cancellation
- IChatEndpoint / HttpChatEndpoint: The remote chat endpoint
- IChatService: Interface for the server-side operations
- Chat models and exceptions
"""

from .interfaces import IChatEndpoint, IChatService
from .models import (
    ChatReply,
    ChatRequest,
    ChatSession,
    ChatSessionDetail,
    Message,
    MessageRole,
    SessionDetailResponse,
    SessionListResponse,
    recent_history,
    visible_messages,
)
from .exceptions import (
    ChatError,
    ChatRequestFailedError,
    ChatSessionNotFoundError,
    CompletionProviderError,
)
from .client import HttpChatEndpoint
from .orchestrator import CancellationToken, ChatOrchestrator

__all__ = [
    # Interfaces
    "IChatEndpoint",
    "IChatService",
    # Client side
    "ChatOrchestrator",
    "CancellationToken",
    "HttpChatEndpoint",
    # Models
    "ChatReply",
    "ChatRequest",
    "ChatSession",
    "ChatSessionDetail",
    "Message",
    "MessageRole",
    "SessionDetailResponse",
    "SessionListResponse",
    "recent_history",
    "visible_messages",
    # Exceptions
    "ChatError",
    "ChatRequestFailedError",
    "ChatSessionNotFoundError",
    "CompletionProviderError",
]
