"""
Accounts and bearer tokens.

Passwords are stored as salted PBKDF2-SHA256 hashes in the form
``pbkdf2_sha256$<iterations>$<salt>$<hash>``. Bearer tokens are random
strings handed to the client once; only their sha256 digest is stored.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.base import utc_now
from bookbridge.core.database.entities.accounts import Account, AuthToken
from bookbridge.core.database.entities.profiles import Profile
from bookbridge.core.database.repositories import AccountRepository, AuthTokenRepository
from bookbridge.core.errors import AuthenticationError, ConstraintViolationError, InvalidOperationError
from bookbridge.core.logging_config import get_logger
from bookbridge.core.policy import Caller
from bookbridge.server.core.config import AuthConfig, settings

from .provisioning import provision_profile

logger = get_logger(__name__)

_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: int = 260_000) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), iterations)
    return f"{_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("ascii"), rounds)
    return hmac.compare_digest(digest.hex(), expected)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IssuedToken:
    """A freshly issued bearer token. ``token`` is never stored."""

    token: str
    record: AuthToken


class AuthService:
    """Sign-up, sign-in, sign-out and token verification."""

    def __init__(self, session: AsyncSession, config: Optional[AuthConfig] = None) -> None:
        self.session = session
        self.config = config or settings.auth
        self.accounts = AccountRepository(session)
        self.tokens = AuthTokenRepository(session)

    async def sign_up(self, email: str, password: str, full_name: Optional[str] = None) -> tuple[IssuedToken, Profile]:
        """Create an account, provision its profile and sign it in.

        Raises:
            InvalidOperationError: The password is too short.
            ConstraintViolationError: The email is already registered.
        """
        if len(password) < self.config.min_password_length:
            raise InvalidOperationError(f"Password must be at least {self.config.min_password_length} characters")

        email = email.strip().lower()
        if await self.accounts.get_by_email(email) is not None:
            raise ConstraintViolationError("An account with this email already exists")

        metadata = {"full_name": full_name.strip()} if full_name and full_name.strip() else {}
        account = await self.accounts.create(
            Account(
                email=email,
                password_hash=hash_password(password, self.config.password_iterations),
                user_metadata=metadata,
            )
        )
        profile = await provision_profile(self.session, account.id, account.user_metadata)
        logger.info(f"Registered account {account.id}")
        return await self._issue(account), profile

    async def sign_in(self, email: str, password: str) -> IssuedToken:
        """Verify credentials and issue a new token.

        Raises:
            AuthenticationError: Unknown email or wrong password.
        """
        account = await self.accounts.get_by_email(email)
        if account is None or not verify_password(password, account.password_hash):
            raise AuthenticationError("Invalid email or password")
        return await self._issue(account)

    async def sign_out(self, token: str) -> bool:
        """Revoke a token. Returns False when it was already gone."""
        return await self.tokens.revoke(hash_token(token))

    async def resolve_caller(self, token: Optional[str]) -> Caller:
        """Turn a presented bearer token into the request's caller.

        No token gives the anonymous caller; an unknown or expired token is
        rejected rather than silently downgraded.
        """
        if not token:
            return Caller.anonymous()
        record = await self.tokens.get_active(hash_token(token), utc_now())
        if record is None:
            raise AuthenticationError("Invalid or expired token")
        return Caller.user(record.account_id)

    async def _issue(self, account: Account) -> IssuedToken:
        token = secrets.token_urlsafe(32)
        now = utc_now()
        record = await self.tokens.create(
            AuthToken(
                token_hash=hash_token(token),
                account_id=account.id,
                created_at=now,
                expires_at=now + timedelta(seconds=self.config.token_ttl_seconds),
            )
        )
        return IssuedToken(token=token, record=record)
