"""
Account entity models.

This module contains the database entities for sign-in credentials and the
bearer tokens issued to signed-in accounts. A profile row with the same id is
provisioned for every account.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict
from uuid import uuid4

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class Account(Base, table=True):
    """Entity for a registered account.

    Table: accounts
    """

    __tablename__ = "accounts"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    email: str = Field(max_length=320, unique=True, index=True)
    password_hash: str = Field(max_length=256)
    user_metadata: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Account(id={self.id}, email={self.email})"


class AuthToken(Base, table=True):
    """Entity for an issued bearer token; only the token's sha256 digest is stored.

    Table: auth_tokens
    """

    __tablename__ = "auth_tokens"

    token_hash: str = Field(primary_key=True, max_length=64)
    account_id: str = Field(foreign_key="accounts.id", ondelete="CASCADE", index=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime

    def __repr__(self) -> str:
        return f"AuthToken(account_id={self.account_id}, expires_at={self.expires_at})"
