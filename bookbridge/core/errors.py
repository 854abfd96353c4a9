"""Error types for the BookBridge marketplace.

Defines a small hierarchy of exceptions raised by services and repositories to
signal authentication failures, policy violations, missing rows, and store
constraint rejections. The server maps each class to an HTTP status code.
"""

from __future__ import annotations


class BookBridgeError(Exception):
    """Base error for all marketplace exceptions."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(BookBridgeError):
    """Raised when an operation needs a signed-in caller and none is present."""

    status_code = 401

    def __init__(self, message: str = "Sign in required") -> None:
        super().__init__(message)


class AuthorizationError(BookBridgeError):
    """Raised when a row-level policy denies the requested operation."""

    status_code = 403

    def __init__(self, resource: str, operation: str, reason: str | None = None) -> None:
        detail = f"Not permitted to {operation} {resource}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail)
        self.resource = resource
        self.operation = operation


class NotFoundError(BookBridgeError):
    """Raised when a row does not exist or is not visible to the caller."""

    status_code = 404

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} {identifier} not found")
        self.resource = resource
        self.identifier = identifier


class InvalidOperationError(BookBridgeError):
    """Raised when a request is well-formed but not applicable to the target row."""

    status_code = 400


class ConstraintViolationError(BookBridgeError):
    """Raised when the store rejects a write because of a CHECK or unique constraint."""

    status_code = 409


class InsufficientCopiesError(BookBridgeError):
    """Raised when an order asks for more copies than the listing has left."""

    status_code = 409

    def __init__(self, book_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Requested quantity {requested} exceeds available copies ({available}) for book {book_id}"
        )
        self.book_id = book_id
        self.requested = requested
        self.available = available


class ServiceUnavailableError(BookBridgeError):
    """Raised when an optional backing service is not configured."""

    status_code = 503
