"""
Profile repository.

Data access for public user profiles, including the idempotent insert used by
the provisioning hook.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.errors import ConstraintViolationError

from ..entities.profiles import Profile
from .base import AsyncBaseRepository


class ProfileRepository(AsyncBaseRepository[Profile]):
    """Repository for profile data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Profile)

    async def create_if_missing(self, profile_id: str, full_name: Optional[str] = None) -> Profile:
        """Insert the profile for ``profile_id`` unless it already exists.

        Calling this twice for the same identity leaves exactly one row; a
        concurrent insert that wins the race is picked up instead of failing.

        Args:
            profile_id: Account identifier the profile belongs to
            full_name: Display name copied from sign-up metadata

        Returns:
            The stored profile (new or existing)
        """
        existing = await self.get_by_id(profile_id)
        if existing is not None:
            return existing

        try:
            return await self.create(Profile(id=profile_id, full_name=full_name))
        except ConstraintViolationError:
            existing = await self.get_by_id(profile_id)
            if existing is None:
                raise
            return existing
