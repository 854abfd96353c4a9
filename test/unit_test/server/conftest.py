from typing import AsyncGenerator, Awaitable, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.session import get_session
from bookbridge.server.core.config import StorageConfig
from bookbridge.server.main import app
from bookbridge.server.services.assistant import get_assistant_agent
from bookbridge.server.services.deps import get_auth_config, get_session_factory, get_storage_config
from bookbridge.server.services.realtime import MessageBroker, get_broker

SignUp = Callable[..., Awaitable[Dict[str, str]]]


@pytest.fixture
def broker() -> MessageBroker:
    return MessageBroker()


@pytest.fixture
def storage_config(tmp_path) -> StorageConfig:
    return StorageConfig(root=str(tmp_path / "storage"), max_bytes=1024)


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session_factory, broker, storage_config, auth_config
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, wired to the test database and fresh in-process services."""

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_broker] = lambda: broker
    app.dependency_overrides[get_auth_config] = lambda: auth_config
    app.dependency_overrides[get_storage_config] = lambda: storage_config
    app.dependency_overrides[get_assistant_agent] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def signup(client: AsyncClient) -> SignUp:
    """Register through the API and return the Authorization header for the new account."""

    async def _signup(email: str, full_name: str = "Reader") -> Dict[str, str]:
        response = await client.post(
            "/api/v1/auth/signup", json={"email": email, "password": "secret123", "full_name": full_name}
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _signup
