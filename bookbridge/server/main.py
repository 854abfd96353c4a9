"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request timing), registers exception handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bookbridge.core.database.session import init_db
from bookbridge.core.logging_config import get_logger, setup_logging
from bookbridge.core.monitoring import initialize_logfire

from .api.v1 import assistant, auth, books, conversations, health, orders, profiles, storage
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestTimingMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the schema on startup when auto-creation is enabled.
    """
    logger.info("Starting up BookBridge Server...")
    await init_db()
    logger.info("Database initialized successfully")

    yield

    logger.info("Shutting down BookBridge Server...")


def create_app() -> FastAPI:
    application = FastAPI(
        title=constant.PROJECT_NAME,
        description="""
    BookBridge Server API

    Backend for a peer-to-peer book marketplace: list books to sell, donate or
    exchange, place cash-on-delivery orders, and chat with the other party.
    """,
        version=constant.VERSION,
        openapi_url=f"{constant.API_V1_STR}/openapi.json",
        docs_url=f"{constant.API_V1_STR}/docs",
        redoc_url=f"{constant.API_V1_STR}/redoc",
        lifespan=lifespan,
    )

    cors = settings.cors
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    application.add_middleware(RequestTimingMiddleware)
    setup_exception_handlers(application)

    application.include_router(health.router, tags=["health"])
    application.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth", tags=["auth"])
    application.include_router(profiles.router, prefix=f"{constant.API_V1_STR}/profiles", tags=["profiles"])
    application.include_router(books.router, prefix=f"{constant.API_V1_STR}/books", tags=["books"])
    application.include_router(orders.router, prefix=f"{constant.API_V1_STR}/orders", tags=["orders"])
    application.include_router(
        conversations.router, prefix=f"{constant.API_V1_STR}/conversations", tags=["conversations"]
    )
    application.include_router(storage.router, prefix=f"{constant.API_V1_STR}/storage", tags=["storage"])
    application.include_router(assistant.router, prefix=f"{constant.API_V1_STR}/assistant", tags=["assistant"])

    initialize_logfire(application)
    return application


app = create_app()
