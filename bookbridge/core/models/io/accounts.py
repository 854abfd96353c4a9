"""
Account I/O models.

Request and response schemas for sign-up, sign-in and the issued session.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .profiles import ProfileRead


class SignUpRequest(BaseModel):
    """Schema for creating an account."""

    email: EmailStr = Field(description="Sign-in email address")
    password: str = Field(min_length=6, max_length=128, description="Account password")
    full_name: Optional[str] = Field(default=None, max_length=100, description="Display name for the new profile")


class LoginRequest(BaseModel):
    """Schema for signing in."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class SessionRead(BaseModel):
    """Schema returned when a bearer token is issued."""

    access_token: str = Field(description="Opaque bearer token")
    token_type: str = Field(default="bearer")
    expires_at: datetime
    user_id: str
    profile: Optional[ProfileRead] = None
