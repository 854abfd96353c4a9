"""
Book listing I/O models.

A listing in ``sell`` mode must carry a positive price; ``donate`` and
``exchange`` listings must not carry one.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bookbridge.core.database.entities.books import BookMode, BookType


def check_price_for_mode(mode: Optional[BookMode], price: Optional[Decimal]) -> None:
    """Raise ``ValueError`` when ``price`` does not fit the listing mode."""
    if mode is BookMode.sell and (price is None or price <= 0):
        raise ValueError("a book listed for sale needs a price greater than zero")
    if mode is not None and mode is not BookMode.sell and price is not None:
        raise ValueError(f"a book listed for {mode.value} cannot carry a price")


class BookCreate(BaseModel):
    """Schema for listing a new book. The owner is always the caller."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    book_type: BookType
    mode: BookMode
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=5000)
    image_url: Optional[str] = Field(default=None, max_length=500)
    available_copies: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _price_matches_mode(self) -> "BookCreate":
        check_price_for_mode(self.mode, self.price)
        return self


# Listing columns that may be omitted from an edit but never cleared.
NOT_NULLABLE_ON_UPDATE = ("title", "author", "category", "book_type", "mode", "available_copies")


class BookUpdate(BaseModel):
    """Schema for editing a listing; omitted fields keep their stored value."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    book_type: Optional[BookType] = None
    mode: Optional[BookMode] = None
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=5000)
    image_url: Optional[str] = Field(default=None, max_length=500)
    available_copies: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _required_fields_not_null(self) -> "BookUpdate":
        cleared = sorted(
            name for name in NOT_NULLABLE_ON_UPDATE if name in self.model_fields_set and getattr(self, name) is None
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class BookRead(BaseModel):
    """Schema for reading a listing."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    author: str
    category: str
    book_type: BookType
    mode: BookMode
    price: Optional[Decimal] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    available_copies: int
    created_at: datetime
    updated_at: datetime
    owner_name: Optional[str] = Field(default=None, description="Owner's full name")
    owner_avatar_url: Optional[str] = Field(default=None, description="Owner's avatar")


class BookListItem(BookRead):
    """Schema for one entry of the browse list."""
