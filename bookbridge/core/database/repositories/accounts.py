"""
Account and token repositories.

Data access for sign-in credentials and issued bearer tokens.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from ..entities.accounts import Account, AuthToken
from .base import AsyncBaseRepository


class AccountRepository(AsyncBaseRepository[Account]):
    """Repository for account data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Account)

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get an account by email, compared case-insensitively.

        Args:
            email: Email address

        Returns:
            Account instance or None
        """
        stmt = select(Account).where(func.lower(Account.email) == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()


class AuthTokenRepository(AsyncBaseRepository[AuthToken]):
    """Repository for issued bearer tokens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuthToken)

    async def get_active(self, token_hash: str, now: datetime) -> Optional[AuthToken]:
        """Get a token that has not expired yet.

        Args:
            token_hash: sha256 digest of the presented token
            now: Reference time for expiry

        Returns:
            AuthToken instance or None when unknown or expired
        """
        stmt = select(AuthToken).where((AuthToken.token_hash == token_hash) & (AuthToken.expires_at > now))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def revoke(self, token_hash: str) -> bool:
        """Delete a token. Returns True when a token was removed."""
        result = await self.session.execute(delete(AuthToken).where(AuthToken.token_hash == token_hash))
        await self.commit()
        return result.rowcount > 0

    async def purge_expired(self, now: datetime) -> int:
        """Delete every expired token and return how many were removed."""
        result = await self.session.execute(delete(AuthToken).where(AuthToken.expires_at <= now))
        await self.commit()
        return result.rowcount
