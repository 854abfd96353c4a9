from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, Iterable, Tuple

import httpx
import pytest
import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Load dotenv files early so fixtures and settings can read them via os.getenv
TEST_ROOT = Path(__file__).resolve().parent
load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)

# Point the application at an in-memory database before anything imports it
os.environ.setdefault("BOOKBRIDGE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BOOKBRIDGE_DATABASE_AUTO_CREATE", "false")
os.environ.pop("BOOKBRIDGE_ASSISTANT_MODEL", None)

from bookbridge.core.database import create_all, create_engine, create_sessionmaker  # noqa: E402
from bookbridge.core.policy import Caller  # noqa: E402
from bookbridge.server.core.config import AuthConfig  # noqa: E402
from test.settings import test_settings  # noqa: E402

UserFactory = Callable[..., Awaitable[Tuple[Caller, str]]]


@pytest.fixture(scope="session")
def test_config():
    """Fixture providing test configuration from Pydantic settings model."""
    return test_settings


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with the full schema, one per test."""
    engine = create_engine(
        test_settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(password_iterations=test_settings.password_iterations)


@pytest.fixture
def make_user(session_factory, auth_config) -> UserFactory:
    """Register an account (profile included) and return its caller and bearer token."""
    from bookbridge.server.services.auth import AuthService

    counter = {"n": 0}

    async def _make(full_name: str = "Test User", email: str | None = None) -> Tuple[Caller, str]:
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        async with session_factory() as s:
            issued, _ = await AuthService(s, auth_config).sign_up(email, "secret123", full_name)
        return Caller.user(issued.record.account_id), issued.token

    return _make
