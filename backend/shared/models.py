"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    This model is populated from JWT claims and made available
    to route handlers via dependency injection.
    """

    id: str = Field(..., description="User ID (UUID from Supabase)")
    email: EmailStr = Field(..., description="User's email address")
    email_verified: bool = Field(default=False, description="Whether email is verified")

    created_at: Optional[datetime] = Field(None, description="Account creation time")
    last_sign_in: Optional[datetime] = Field(None, description="Last sign-in time")

    role: str = Field(default="user", description="User role")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from JWT
    }


class AuthSession(BaseModel):
    """
    An established identity session held by the identity gateway.

    This is what the chat orchestrator reads to know who is talking:
    the user id scopes session queries, the access token authorizes
    calls to the chat endpoint.
    """

    user_id: str = Field(..., description="Identity ID (UUID from Supabase)")
    email: Optional[str] = Field(None, description="Email of the identity")
    access_token: str = Field(..., description="Bearer token for API calls")
    refresh_token: Optional[str] = Field(None, description="Token used to renew the session")
    expires_at: Optional[int] = Field(None, description="Access token expiry (epoch seconds)")

    model_config = {"frozen": True}
