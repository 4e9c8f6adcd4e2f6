"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by the UI layer (or API error handlers) to show the right message:
field errors next to the field, credential errors as a toast,
challenge errors next to the code input.
"""

from typing import Optional

from shared.exceptions import (
    MiraError,
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)


class FieldValidationError(ValidationError):
    """Raised when a form field fails local validation (no network call made)."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message,
            code="INVALID_FIELD",
            details={"field": field},
        )
        self.field = field


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class CredentialError(AuthenticationError):
    """Raised when the identity gateway rejects a credential operation."""

    def __init__(self, message: str, code: str = "CREDENTIAL_REJECTED"):
        super().__init__(message, code=code)


class InvalidCredentialsError(CredentialError):
    """Raised when the email/password pair is wrong."""

    def __init__(self, message: str = "Please check your email and password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class AccountExistsError(CredentialError):
    """Raised when signing up with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            "An account with this email already exists. Please sign in.",
            code="ACCOUNT_EXISTS",
        )
        self.details["email"] = email


class SessionNotEstablishedError(CredentialError):
    """Raised when verification succeeded but the gateway holds no session."""

    def __init__(self, message: str = "No session created after verification"):
        super().__init__(message, code="SESSION_NOT_ESTABLISHED")


class ChallengeError(MiraError):
    """Base exception for OTP challenge failures."""

    pass


class InvalidChallengeCodeError(ChallengeError):
    """Raised when the submitted code is wrong. The user may retry."""

    def __init__(self, attempts: int = 0, message: str = "Invalid verification code"):
        super().__init__(
            message,
            code="INVALID_CODE",
            details={"attempts": attempts},
        )


class ChallengeExpiredError(ChallengeError):
    """Raised when the challenge has expired. A resend is required."""

    def __init__(self, challenge_id: Optional[str] = None):
        super().__init__(
            "Verification code has expired. Please request a new one.",
            code="CODE_EXPIRED",
            details={"challenge_id": challenge_id},
        )


class ResendCooldownError(ChallengeError):
    """Raised when a resend is requested before the cooldown elapsed."""

    def __init__(self, retry_in: int):
        super().__init__(
            f"Please wait {retry_in}s before requesting a new code",
            code="RESEND_COOLDOWN",
            details={"retry_in": retry_in},
        )
        self.retry_in = retry_in


class NoActiveChallengeError(ChallengeError):
    """Raised when there is no live challenge to verify or resend."""

    def __init__(self):
        super().__init__(
            "There is no verification code to check. Please start again.",
            code="NO_ACTIVE_CHALLENGE",
        )


class InvalidTransitionError(MiraError):
    """Raised when an operation is not valid in the current flow phase."""

    def __init__(self, operation: str, phase: str):
        super().__init__(
            f"Cannot {operation} while in phase '{phase}'",
            code="INVALID_TRANSITION",
            details={"operation": operation, "phase": phase},
        )


class TransitionInProgressError(MiraError):
    """Raised when the same transition is submitted again while in flight."""

    def __init__(self, operation: str):
        super().__init__(
            f"{operation} is already in progress",
            code="TRANSITION_IN_PROGRESS",
            details={"operation": operation},
        )


class AuthenticationRequiredError(AuthorizationError):
    """Raised when an operation needs an established session and there is none."""

    def __init__(self, message: str = "Please sign in to continue the conversation"):
        super().__init__(message, code="AUTHENTICATION_REQUIRED")
