"""
Listing service.

Browse, detail and owner-only create/update/delete for book listings.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.entities.books import Book, BookMode, BookType
from bookbridge.core.database.repositories import BookRepository
from bookbridge.core.database.repositories.books import BookWithOwner
from bookbridge.core.errors import AuthenticationError, InvalidOperationError, NotFoundError
from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.books import BookCreate, BookRead, BookUpdate, check_price_for_mode
from bookbridge.core.policy import Caller, Operation, Resource, enforce

logger = get_logger(__name__)


def to_book_read(row: BookWithOwner) -> BookRead:
    book, owner_name, owner_avatar_url = row
    return BookRead.model_validate(
        {**book.model_dump(), "owner_name": owner_name, "owner_avatar_url": owner_avatar_url}
    )


class BookService:
    """Service for book listings."""

    def __init__(self, session: AsyncSession, caller: Caller) -> None:
        self.session = session
        self.caller = caller
        self.books = BookRepository(session)

    async def browse(
        self,
        q: Optional[str] = None,
        mode: Optional[BookMode] = None,
        book_type: Optional[BookType] = None,
        user_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[BookRead]:
        rows = await self.books.search(q=q, mode=mode, book_type=book_type, user_id=user_id, limit=limit, offset=offset)
        return [to_book_read(row) for row in rows]

    async def get(self, book_id: str) -> BookRead:
        row = await self.books.get_with_owner(book_id)
        if row is None:
            raise NotFoundError("book", book_id)
        return to_book_read(row)

    async def create(self, payload: BookCreate) -> BookRead:
        """List a new book owned by the caller."""
        if not self.caller.is_authenticated:
            raise AuthenticationError()

        book = Book(user_id=self.caller.user_id, **payload.model_dump())
        enforce(Resource.books, Operation.insert, self.caller, new=book)
        book = await self.books.create(book)
        logger.info(f"Book {book.id} listed by {self.caller.user_id} ({book.mode.value})")
        return await self.get(book.id)

    async def update(self, book_id: str, payload: BookUpdate) -> BookRead:
        """Apply a partial update; the merged listing must keep a valid price for its mode.

        Switching a listing away from ``sell`` without sending a price clears
        the stored price.
        """
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        book = await self._get_book(book_id)

        changes = payload.model_dump(exclude_unset=True)
        if changes.get("mode") not in (None, BookMode.sell) and "price" not in changes:
            changes["price"] = None

        merged = {**book.model_dump(), **changes}
        try:
            check_price_for_mode(merged["mode"], merged["price"])
        except ValueError as e:
            raise InvalidOperationError(str(e)) from e

        enforce(Resource.books, Operation.update, self.caller, existing=book, new=merged)
        for name, value in changes.items():
            setattr(book, name, value)
        await self.books.update(book)
        return await self.get(book.id)

    async def delete(self, book_id: str) -> None:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        book = await self._get_book(book_id)
        enforce(Resource.books, Operation.delete, self.caller, existing=book)
        await self.books.delete(book)
        logger.info(f"Book {book_id} removed by {self.caller.user_id}")

    async def _get_book(self, book_id: str) -> Book:
        book = await self.books.get_by_id(book_id)
        if book is None:
            raise NotFoundError("book", book_id)
        return book
