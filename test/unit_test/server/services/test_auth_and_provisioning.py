"""Accounts, bearer tokens and the profile provisioning hook."""

import pytest
from sqlmodel import select

from bookbridge.core.database.entities.accounts import Account
from bookbridge.core.database.entities.profiles import Profile
from bookbridge.core.errors import AuthenticationError, ConstraintViolationError, InvalidOperationError
from bookbridge.core.policy import CallerRole
from bookbridge.server.services.auth import AuthService, hash_password, hash_token, verify_password
from bookbridge.server.services.provisioning import provision_profile


def test_password_hash_round_trip():
    encoded = hash_password("secret123", iterations=1000)
    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert verify_password("secret123", encoded)
    assert not verify_password("wrong", encoded)
    assert not verify_password("secret123", "garbage")


def test_token_hash_is_sha256_hex():
    assert len(hash_token("abc")) == 64


async def test_sign_up_provisions_exactly_one_profile(session, auth_config):
    issued, profile = await AuthService(session, auth_config).sign_up("asha@example.com", "secret123", "Asha")

    assert profile.id == issued.record.account_id
    assert profile.full_name == "Asha"
    profiles = (await session.execute(select(Profile))).scalars().all()
    assert len(profiles) == 1


async def test_provisioning_twice_is_a_no_op(session, auth_config):
    issued, _ = await AuthService(session, auth_config).sign_up("asha@example.com", "secret123", "Asha")
    again = await provision_profile(session, issued.record.account_id, {"full_name": "Changed"})

    assert again.full_name == "Asha"
    assert len((await session.execute(select(Profile))).scalars().all()) == 1


async def test_sign_up_rejects_duplicate_email_and_short_password(session, auth_config):
    service = AuthService(session, auth_config)
    await service.sign_up("asha@example.com", "secret123")
    with pytest.raises(ConstraintViolationError):
        await service.sign_up("ASHA@example.com", "secret123")
    with pytest.raises(InvalidOperationError):
        await service.sign_up("new@example.com", "123")
    assert len((await session.execute(select(Account))).scalars().all()) == 1


async def test_sign_in_and_out(session, auth_config):
    service = AuthService(session, auth_config)
    await service.sign_up("asha@example.com", "secret123")

    with pytest.raises(AuthenticationError):
        await service.sign_in("asha@example.com", "wrong-password")

    issued = await service.sign_in("asha@example.com", "secret123")
    caller = await service.resolve_caller(issued.token)
    assert caller.role is CallerRole.authenticated
    assert caller.user_id == issued.record.account_id

    assert await service.sign_out(issued.token) is True
    with pytest.raises(AuthenticationError):
        await service.resolve_caller(issued.token)


async def test_missing_token_is_anonymous(session, auth_config):
    caller = await AuthService(session, auth_config).resolve_caller(None)
    assert caller.role is CallerRole.anon
    assert not caller.is_authenticated
