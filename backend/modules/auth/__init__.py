"""
Authentication module.

Handles the sign-in / sign-up / password reset flows with one-time-code
verification, and JWT validation for the API.

Public API:
- AuthStateMachine: The verification flow for one UI session
- IIdentityGateway / SupabaseIdentityGateway: Identity provider seam
- ChallengeTimer, PendingProfileStore: Flow building blocks
- validate_email / validate_password: Local credential checks
- IAuthService: Interface for token validation
- Auth exceptions: FieldValidationError, CredentialError, ChallengeError, etc.
"""

from .interfaces import IAuthService, IIdentityGateway
from .models import (
    AuthFlowState,
    AuthMode,
    AuthPhase,
    ChallengePurpose,
    Credentials,
    JWTPayload,
    SignUpDetails,
    SignUpProfile,
    VerificationChallenge,
)
from .exceptions import (
    AccountExistsError,
    AuthenticationRequiredError,
    ChallengeError,
    ChallengeExpiredError,
    CredentialError,
    ExpiredTokenError,
    FieldValidationError,
    InvalidChallengeCodeError,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidTransitionError,
    MissingTokenError,
    NoActiveChallengeError,
    ResendCooldownError,
    SessionNotEstablishedError,
    TransitionInProgressError,
)
from .pending import PendingProfileStore
from .state_machine import AuthStateMachine
from .timer import ChallengeTimer, Countdown
from .validators import validate_email, validate_password

__all__ = [
    # Interfaces
    "IAuthService",
    "IIdentityGateway",
    # Flow
    "AuthStateMachine",
    "ChallengeTimer",
    "Countdown",
    "PendingProfileStore",
    "validate_email",
    "validate_password",
    # Models
    "AuthFlowState",
    "AuthMode",
    "AuthPhase",
    "ChallengePurpose",
    "Credentials",
    "JWTPayload",
    "SignUpDetails",
    "SignUpProfile",
    "VerificationChallenge",
    # Exceptions
    "AccountExistsError",
    "AuthenticationRequiredError",
    "ChallengeError",
    "ChallengeExpiredError",
    "CredentialError",
    "ExpiredTokenError",
    "FieldValidationError",
    "InvalidChallengeCodeError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "InvalidTransitionError",
    "MissingTokenError",
    "NoActiveChallengeError",
    "ResendCooldownError",
    "SessionNotEstablishedError",
    "TransitionInProgressError",
]
