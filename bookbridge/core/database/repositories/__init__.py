"""
Repository layer, one repository per table.

Repositories wrap an ``AsyncSession`` and translate store constraint
rejections into ``ConstraintViolationError``. Authorization happens in the
service layer before a repository is called.
"""

from .accounts import AccountRepository, AuthTokenRepository
from .base import AsyncBaseRepository, QueryBuilder
from .books import BookRepository
from .conversations import ConversationRepository, MessageRepository
from .orders import OrderRepository
from .profiles import ProfileRepository

__all__ = [
    "AccountRepository",
    "AsyncBaseRepository",
    "AuthTokenRepository",
    "BookRepository",
    "ConversationRepository",
    "MessageRepository",
    "OrderRepository",
    "ProfileRepository",
    "QueryBuilder",
]
