"""
Book listing entity models.

This module contains the database entity for book listings together with the
enumerations for listing type and mode. Two CHECK constraints are carried by
the table itself:

- a book in ``sell`` mode must have a positive price;
- ``available_copies`` never drops below zero.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field

from ..base import Base, utc_now


class BookType(str, Enum):
    """Kind of book being listed."""

    textbook = "textbook"
    novel = "novel"
    storybook = "storybook"
    comics = "comics"
    biography = "biography"
    other = "other"


class BookMode(str, Enum):
    """Transaction type of a listing."""

    sell = "sell"
    donate = "donate"
    exchange = "exchange"


class Book(Base, table=True):
    """Entity for a book listing.

    Owned by the creating user; readable by anyone.

    Table: books
    """

    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint(
            "mode <> 'sell' OR (price IS NOT NULL AND price > 0)",
            name="price_required_for_sell",
        ),
        CheckConstraint("available_copies >= 0", name="available_copies_non_negative"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    user_id: str = Field(foreign_key="profiles.id", ondelete="CASCADE", index=True, max_length=36)

    title: str
    author: str
    category: str
    book_type: BookType = Field(sa_type=SAEnum(BookType, name="book_type"))
    mode: BookMode = Field(sa_type=SAEnum(BookMode, name="book_mode"))
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)
    available_copies: int = Field(default=1)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title={self.title}, mode={self.mode})"
