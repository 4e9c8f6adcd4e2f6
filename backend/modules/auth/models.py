"""
Authentication module data models.

These models define the data structures used by the auth flow
and exposed to other modules through the interface.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class AuthMode(str, Enum):
    """Which form the user started from."""

    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


class ChallengePurpose(str, Enum):
    """What a one-time code is proving control of the mailbox for."""

    SIGN_UP = "sign_up"
    SIGN_IN = "sign_in"
    PASSWORD_RESET = "password_reset"


class AuthPhase(str, Enum):
    """Phases of the auth state machine."""

    IDLE = "idle"
    CREDENTIALS_ENTERED = "credentials_entered"            # Password check in flight
    PASSWORD_RESET_REQUESTED = "password_reset_requested"  # Reset OTP in flight
    CHALLENGE_ISSUED = "challenge_issued"
    PASSWORD_UPDATE_PENDING = "password_update_pending"
    SESSION_ESTABLISHED = "session_established"


class JWTPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    This matches the structure of Supabase Auth JWTs.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    email_confirmed_at: Optional[str] = Field(None, description="When the email was confirmed")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="User role")

    # Supabase-specific claims
    app_metadata: dict = Field(default_factory=dict)
    user_metadata: dict = Field(default_factory=dict)


class Credentials(BaseModel):
    """Email/password pair. Never persisted."""

    email: str = Field(..., description="Email address as typed")
    password: str = Field(..., repr=False, description="Password as typed")


class SignUpDetails(BaseModel):
    """Extra fields collected by the sign-up form."""

    first_name: str = Field(default="", description="Given name")
    last_name: str = Field(default="", description="Family name")
    date_of_birth: Optional[str] = Field(None, description="Date of birth (YYYY-MM-DD)")
    terms_accepted: bool = Field(default=False, description="Terms of Service checkbox")


class SignUpProfile(BaseModel):
    """Profile fields held until the sign-up challenge is verified."""

    email: str = Field(..., description="Email address")
    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")
    date_of_birth: Optional[str] = Field(None, description="Date of birth")

    def to_profile_fields(self) -> dict:
        """Fields to upsert into the profile store."""
        return self.model_dump()


class VerificationChallenge(BaseModel):
    """An issued one-time code awaiting verification."""

    id: str = Field(..., description="Unique challenge ID")
    target_email: str = Field(..., description="Where the code was sent")
    purpose: ChallengePurpose = Field(..., description="What the code is for")
    issued_at: datetime = Field(..., description="When the code was sent")
    expires_at: datetime = Field(..., description="When the code stops being accepted")
    attempts: int = Field(default=0, ge=0, description="Failed verification attempts")


class AuthFlowState(BaseModel):
    """
    Snapshot of the auth state machine.

    The machine hands out copies; mutating a snapshot has no effect.
    """

    phase: AuthPhase = Field(default=AuthPhase.IDLE, description="Current phase")
    mode: AuthMode = Field(default=AuthMode.SIGN_IN, description="Form the flow started from")
    purpose: Optional[ChallengePurpose] = Field(None, description="Purpose of the live challenge")
    pending_email: Optional[str] = Field(None, description="Email the flow is about")
    pending_identity_id: Optional[str] = Field(
        None,
        description="Identity created by sign-up, awaiting verification",
    )
    challenge: Optional[VerificationChallenge] = Field(None, description="Live challenge")
    is_loading: bool = Field(default=False, description="Whether a gateway call is in flight")
    error: Optional[str] = Field(None, description="Last user-visible error message")

    @property
    def is_authenticated(self) -> bool:
        return self.phase == AuthPhase.SESSION_ESTABLISHED
