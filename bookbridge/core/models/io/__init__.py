"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- accounts: Sign-up, sign-in and session models
- profiles: Public profile models
- books: Listing create/update/read models
- orders: Checkout and order models
- conversations: Chat thread and message models
- storage: Uploaded object models
- assistant: Ask-AI question and answer models
"""

from .accounts import LoginRequest, SessionRead, SignUpRequest
from .assistant import AskRequest, AskResponse
from .books import BookCreate, BookListItem, BookRead, BookUpdate
from .conversations import (
    ConversationCreate,
    ConversationDetail,
    ConversationRead,
    MarkReadResult,
    MessageCreate,
    MessageRead,
)
from .orders import OrderCreate, OrderRead, OrderRole
from .profiles import ProfileRead, ProfileUpdate
from .storage import StoredObjectRead

__all__ = [
    "AskRequest",
    "AskResponse",
    "BookCreate",
    "BookListItem",
    "BookRead",
    "BookUpdate",
    "ConversationCreate",
    "ConversationDetail",
    "ConversationRead",
    "LoginRequest",
    "MarkReadResult",
    "MessageCreate",
    "MessageRead",
    "OrderCreate",
    "OrderRead",
    "OrderRole",
    "ProfileRead",
    "ProfileUpdate",
    "SessionRead",
    "SignUpRequest",
    "StoredObjectRead",
]
