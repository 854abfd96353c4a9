"""
Centralized database layer for BookBridge.

This package provides a unified location for all database entities and repositories,
organized by table.

Structure:
- entities/: SQLModel table definitions with their CHECK constraints
- repositories/: Data access layer, one module per table
- session.py: Global engine and session factory management
- utils.py: Database utility functions (engine, session factory, create_all)
"""

from .base import Base, utc_now
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "Base",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "utc_now",
]
