"""
Profile module data models.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Profile(BaseModel):
    """
    A user's profile row.

    One-to-one with an identity; the ID is the identity ID.
    """

    id: str = Field(..., description="Identity ID (UUID)")
    email: str = Field(..., description="Email address")
    first_name: Optional[str] = Field(None, description="Given name")
    last_name: Optional[str] = Field(None, description="Family name")
    date_of_birth: Optional[str] = Field(None, description="Date of birth")
    created_at: Optional[datetime] = Field(None, description="Row creation time")
    updated_at: Optional[datetime] = Field(None, description="Last update time")

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
