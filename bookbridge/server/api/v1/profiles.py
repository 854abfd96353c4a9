"""
Profile endpoints.

Profiles are public; only the owner may edit theirs through ``/profiles/me``.
"""

from fastapi import APIRouter

from bookbridge.core.models.io.profiles import ProfileRead, ProfileUpdate
from bookbridge.server.services.deps import ProfileServiceDep, UserDep

router = APIRouter()


@router.patch(
    "/me",
    response_model=ProfileRead,
    summary="Update My Profile",
    description="Update the caller's name, avatar or bio.",
)
async def update_my_profile(payload: ProfileUpdate, caller: UserDep, profiles: ProfileServiceDep) -> ProfileRead:
    return ProfileRead.model_validate(await profiles.update_me(payload))


@router.get(
    "/{profile_id}",
    response_model=ProfileRead,
    summary="Get Profile",
    description="Retrieve a public profile by id.",
    responses={404: {"description": "Profile not found"}},
)
async def get_profile(profile_id: str, profiles: ProfileServiceDep) -> ProfileRead:
    return ProfileRead.model_validate(await profiles.get(profile_id))
