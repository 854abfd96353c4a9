from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Resource(str, Enum):
    """Tables and stores guarded by row-level policies."""

    profiles = "profiles"
    books = "books"
    orders = "orders"
    conversations = "conversations"
    messages = "messages"
    storage_objects = "storage_objects"


class Operation(str, Enum):
    """Kind of access requested on a row."""

    select = "select"
    insert = "insert"
    update = "update"
    delete = "delete"


class CallerRole(str, Enum):
    """
    Role of the principal behind a request.

    Attributes:
        anon: No verified credential was presented.
        authenticated: A signed-in account.
        service: Internal principal used by server-side hooks; bypasses row policies.
    """

    anon = "anon"
    authenticated = "authenticated"
    service = "service"


@dataclass(frozen=True)
class Caller:
    """Request-scoped identity derived from a verified credential."""

    user_id: Optional[str] = None
    role: CallerRole = CallerRole.anon

    @classmethod
    def anonymous(cls) -> "Caller":
        return cls()

    @classmethod
    def user(cls, user_id: str) -> "Caller":
        return cls(user_id=user_id, role=CallerRole.authenticated)

    @classmethod
    def service(cls) -> "Caller":
        return cls(role=CallerRole.service)

    @property
    def is_authenticated(self) -> bool:
        return self.role is CallerRole.authenticated and self.user_id is not None

    @property
    def is_service(self) -> bool:
        return self.role is CallerRole.service


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of evaluating a row policy."""

    allowed: bool
    reason: str = ""
