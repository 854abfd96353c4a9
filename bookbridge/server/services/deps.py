"""
Request dependencies.

Provides the database session, the request-scoped ``Caller`` derived from the
bearer token, and the per-request services built from them.
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic_ai import Agent
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookbridge.core.database.session import async_session_maker, get_session
from bookbridge.core.errors import AuthenticationError
from bookbridge.core.policy import Caller
from bookbridge.server.core.config import AuthConfig, StorageConfig, settings

from .assistant import AssistantService, get_assistant_agent
from .auth import AuthService
from .books import BookService
from .chat import ChatService
from .orders import OrderService
from .profiles import ProfileService
from .realtime import MessageBroker, get_broker
from .storage import StorageService

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]
BrokerDep = Annotated[MessageBroker, Depends(get_broker)]


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for work that outlives the request, such as the live feed."""
    return async_session_maker


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_auth_config() -> AuthConfig:
    return settings.auth


async def get_caller(
    session: SessionDep,
    token: Optional[str] = Depends(get_bearer_token),
    config: AuthConfig = Depends(get_auth_config),
) -> Caller:
    return await AuthService(session, config).resolve_caller(token)


async def require_user(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_authenticated:
        raise AuthenticationError()
    return caller


CallerDep = Annotated[Caller, Depends(get_caller)]
UserDep = Annotated[Caller, Depends(require_user)]
TokenDep = Annotated[Optional[str], Depends(get_bearer_token)]
SessionFactoryDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


def get_storage_config() -> StorageConfig:
    return settings.storage


def get_auth_service(session: SessionDep, config: AuthConfig = Depends(get_auth_config)) -> AuthService:
    return AuthService(session, config)


def get_profile_service(session: SessionDep, caller: CallerDep) -> ProfileService:
    return ProfileService(session, caller)


def get_book_service(session: SessionDep, caller: CallerDep) -> BookService:
    return BookService(session, caller)


def get_order_service(session: SessionDep, caller: UserDep) -> OrderService:
    return OrderService(session, caller)


def get_chat_service(session: SessionDep, caller: UserDep, broker: BrokerDep) -> ChatService:
    return ChatService(session, caller, broker)


def get_storage_service(caller: CallerDep, config: StorageConfig = Depends(get_storage_config)) -> StorageService:
    return StorageService(caller, config)


def get_assistant_service(agent: Optional[Agent] = Depends(get_assistant_agent)) -> AssistantService:
    return AssistantService(agent)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
BookServiceDep = Annotated[BookService, Depends(get_book_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]
AssistantServiceDep = Annotated[AssistantService, Depends(get_assistant_service)]