"""Sign-up, sign-in, sign-out and profile endpoints."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_signup_returns_token_and_profile(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/signup", json={"email": "asha@example.com", "password": "secret123", "full_name": "Asha"}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["profile"]["full_name"] == "Asha"
    assert body["profile"]["id"] == body["user_id"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Asha"


async def test_signup_validation_and_duplicates(client: AsyncClient, signup):
    short = await client.post("/api/v1/auth/signup", json={"email": "a@example.com", "password": "123"})
    assert short.status_code == 422
    bad_email = await client.post("/api/v1/auth/signup", json={"email": "not-an-email", "password": "secret123"})
    assert bad_email.status_code == 422

    await signup("dup@example.com")
    again = await client.post("/api/v1/auth/signup", json={"email": "dup@example.com", "password": "secret123"})
    assert again.status_code == 409


async def test_login_logout_cycle(client: AsyncClient, signup):
    await signup("reader@example.com")

    wrong = await client.post("/api/v1/auth/login", json={"email": "reader@example.com", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.headers["WWW-Authenticate"] == "Bearer"

    login = await client.post("/api/v1/auth/login", json={"email": "reader@example.com", "password": "secret123"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    assert (await client.post("/api/v1/auth/logout", headers=headers)).status_code == 204
    assert (await client.get("/api/v1/auth/me", headers=headers)).status_code == 401


async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["error_type"] == "AuthenticationError"


async def test_profile_update_is_owner_only(client: AsyncClient, signup):
    headers = await signup("meera@example.com", "Meera")
    me = (await client.get("/api/v1/auth/me", headers=headers)).json()

    updated = await client.patch("/api/v1/profiles/me", json={"bio": "Loves poetry"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["bio"] == "Loves poetry"
    assert updated.json()["full_name"] == "Meera"

    public = await client.get(f"/api/v1/profiles/{me['id']}")
    assert public.status_code == 200
    assert public.json()["bio"] == "Loves poetry"

    assert (await client.patch("/api/v1/profiles/me", json={"bio": "x"})).status_code == 401
    assert (await client.patch("/api/v1/profiles/me", json={"id": "other"}, headers=headers)).status_code == 422
    assert (await client.get("/api/v1/profiles/missing")).status_code == 404
