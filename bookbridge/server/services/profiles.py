"""Public profiles: read by anyone, edited only by their owner."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.entities.profiles import Profile
from bookbridge.core.database.repositories import ProfileRepository
from bookbridge.core.errors import AuthenticationError, NotFoundError
from bookbridge.core.models.io.profiles import ProfileUpdate
from bookbridge.core.policy import Caller, Operation, Resource, enforce


class ProfileService:
    def __init__(self, session: AsyncSession, caller: Caller) -> None:
        self.caller = caller
        self.profiles = ProfileRepository(session)

    async def get(self, profile_id: str) -> Profile:
        profile = await self.profiles.get_by_id(profile_id)
        if profile is None:
            raise NotFoundError("profile", profile_id)
        return profile

    async def me(self) -> Profile:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        return await self.get(self.caller.user_id)

    async def update_me(self, payload: ProfileUpdate) -> Profile:
        profile = await self.me()
        changes = payload.model_dump(exclude_unset=True)
        enforce(Resource.profiles, Operation.update, self.caller, existing=profile, new={**profile.model_dump(), **changes})
        for name, value in changes.items():
            setattr(profile, name, value)
        return await self.profiles.update(profile)
