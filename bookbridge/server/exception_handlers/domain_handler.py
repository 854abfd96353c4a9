"""
Domain Exception Handlers.

Maps ``BookBridgeError`` subclasses to their HTTP status and turns store
constraint rejections that escaped a repository into 409 responses.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from bookbridge.core.errors import AuthenticationError, BookBridgeError, InsufficientCopiesError
from bookbridge.core.logging_config import get_logger
from bookbridge.core.monitoring import log_error

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: BookBridgeError) -> JSONResponse:
    """
    Render a domain error as ``{"detail": ..., "error_type": ...}``.

    Args:
        request: The HTTP request that caused the exception
        exc: The domain error that was raised

    Returns:
        JSONResponse with the error's status code
    """
    level = logger.warning if exc.status_code >= 409 else logger.info
    level(f"{request.method} {request.url.path} -> {exc.status_code} {type(exc).__name__}: {exc.message}")

    content = {"detail": exc.message, "error_type": type(exc).__name__}
    if isinstance(exc, InsufficientCopiesError):
        content["available_copies"] = exc.available

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Store constraint rejected {request.method} {request.url.path}: {exc.orig}")
    log_error("IntegrityError", str(exc.orig), {"path": request.url.path})
    return JSONResponse(
        status_code=409,
        content={"detail": "The request conflicts with a store constraint", "error_type": "ConstraintViolationError"},
    )
