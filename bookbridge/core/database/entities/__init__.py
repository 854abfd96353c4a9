"""
Database entity models.

This package contains all database entity models, one module per table
(or pair of closely related tables).

Modules:
- accounts: Sign-in credentials and issued bearer tokens
- profiles: Public user profiles
- books: Book listings, listing type and mode enumerations
- orders: Cash-on-delivery purchase records
- conversations: Chat threads and their messages
"""

from . import (
    accounts,
    books,
    conversations,
    orders,
    profiles,
)

__all__ = [
    "accounts",
    "books",
    "conversations",
    "orders",
    "profiles",
]
