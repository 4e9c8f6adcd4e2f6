"""
Base exception classes for the Mira backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class MiraError(Exception):
    """
    Base exception for all Mira errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(MiraError):
    """Resource not found."""

    pass


class ValidationError(MiraError):
    """Input validation failed."""

    pass


class AuthenticationError(MiraError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(MiraError):
    """Authorization failed (no session, or insufficient permissions)."""

    pass


class ExternalServiceError(MiraError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class TransportError(ExternalServiceError):
    """
    Network or timeout failure while talking to an external service.

    Always recoverable: callers keep their in-memory state unchanged.
    """

    def __init__(self, service: str, message: str = "Network request failed"):
        super().__init__(message, service=service, code="TRANSPORT_ERROR")
