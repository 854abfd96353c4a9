"""
Profile entity models.

A profile is the public identity record of an account. It is created by the
provisioning hook when the account is registered and is mutable only by its
owner.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Profile(Base, table=True):
    """Entity for a public user profile.

    Table: profiles
    """

    __tablename__ = "profiles"

    id: str = Field(foreign_key="accounts.id", ondelete="CASCADE", primary_key=True, max_length=36)
    full_name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = Field(default=None)
    bio: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Profile(id={self.id}, full_name={self.full_name})"
