"""
User-related endpoints.

Provides the current user's account and profile.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from modules.profiles.interfaces import IProfileStore
from shared.models import AuthenticatedUser
from ..dependencies import get_profile_store
from ..middleware.auth import get_current_user

router = APIRouter()


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: EmailStr
    email_verified: bool
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    display_name: Optional[str] = None


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    profiles: IProfileStore = Depends(get_profile_store),
) -> UserProfileResponse:
    """
    Get the current user's profile.

    Profile fields stay empty until sign-up verification has stored them.
    """
    profile = await profiles.get_profile(user.id)
    response = UserProfileResponse(
        id=user.id,
        email=user.email,
        email_verified=user.email_verified,
        role=user.role,
    )
    if profile is not None:
        response.first_name = profile.first_name
        response.last_name = profile.last_name
        response.date_of_birth = profile.date_of_birth
        response.display_name = profile.display_name or None
    return response
