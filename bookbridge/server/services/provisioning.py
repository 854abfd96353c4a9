"""
Profile provisioning hook.

Runs right after an account is created and makes sure the matching profile
row exists. It acts as the service principal, so it does not depend on the
new user's own session.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.entities.profiles import Profile
from bookbridge.core.database.repositories import ProfileRepository
from bookbridge.core.logging_config import get_logger
from bookbridge.core.policy import Caller, Operation, Resource, enforce

logger = get_logger(__name__)


async def provision_profile(
    session: AsyncSession, account_id: str, user_metadata: Optional[Mapping[str, Any]] = None
) -> Profile:
    """Create the profile for a new account, once.

    ``full_name`` is copied from the sign-up metadata. Calling the hook again
    for the same account returns the existing profile unchanged.

    Args:
        session: Database session
        account_id: Identifier of the account just created
        user_metadata: Metadata captured at sign-up

    Returns:
        The account's profile
    """
    full_name = (user_metadata or {}).get("full_name")
    row = {"id": account_id, "full_name": full_name}
    enforce(Resource.profiles, Operation.insert, Caller.service(), new=row)

    profile = await ProfileRepository(session).create_if_missing(account_id, full_name=full_name)
    logger.debug(f"Provisioned profile for account {account_id}")
    return profile
