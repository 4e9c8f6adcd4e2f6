"""
Chat module exceptions.
"""

from typing import Optional

from shared.exceptions import MiraError, NotFoundError, ExternalServiceError


class ChatError(MiraError):
    """Base exception for chat-related errors."""

    pass


class ChatSessionNotFoundError(NotFoundError):
    """Raised when a session does not exist or belongs to someone else."""

    def __init__(self, session_id: str):
        super().__init__(
            f"Chat session not found: {session_id}",
            code="CHAT_SESSION_NOT_FOUND",
            details={"session_id": session_id},
        )


class ChatRequestFailedError(ChatError):
    """Raised when the chat endpoint answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(
            message,
            code="CHAT_REQUEST_FAILED",
            details={"status_code": status_code},
        )


class CompletionProviderError(ExternalServiceError):
    """Raised when the LLM provider fails to produce a reply."""

    def __init__(
        self,
        provider: str,
        message: str,
        original_error: Optional[str] = None,
    ):
        super().__init__(
            f"Provider error ({provider}): {message}",
            service=provider,
            code="PROVIDER_ERROR",
            details={"original_error": original_error},
        )
