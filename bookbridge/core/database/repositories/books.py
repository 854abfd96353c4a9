"""
Book repository.

Data access for book listings: filtered browsing joined with the owner's
profile, and the conditional decrement used when an order reserves copies.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from ..entities.books import Book, BookMode, BookType
from ..entities.profiles import Profile
from .base import AsyncBaseRepository, QueryBuilder

# (book, owner full name, owner avatar url)
BookWithOwner = Tuple[Book, Optional[str], Optional[str]]


class BookRepository(AsyncBaseRepository[Book]):
    """Repository for book listing data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Book)

    async def search(
        self,
        q: Optional[str] = None,
        mode: Optional[BookMode] = None,
        book_type: Optional[BookType] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[BookWithOwner]:
        """Browse listings, newest first.

        Args:
            q: Case-insensitive substring matched against title, author and category
            mode: Only listings in this mode
            book_type: Only listings of this type
            user_id: Only listings owned by this user
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            Listings paired with the owner's name and avatar
        """
        stmt = select(Book, Profile.full_name, Profile.avatar_url).outerjoin(Profile, Profile.id == Book.user_id)
        stmt = QueryBuilder.apply_filters(stmt, Book, {"mode": mode, "book_type": book_type, "user_id": user_id})
        if q:
            pattern = f"%{q.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Book.title).like(pattern),
                    func.lower(Book.author).like(pattern),
                    func.lower(Book.category).like(pattern),
                )
            )
        stmt = stmt.order_by(Book.created_at.desc(), Book.id)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return [(book, full_name, avatar_url) for book, full_name, avatar_url in result.all()]

    async def get_with_owner(self, book_id: str) -> Optional[BookWithOwner]:
        """Get one listing together with its owner's name and avatar."""
        stmt = (
            select(Book, Profile.full_name, Profile.avatar_url)
            .outerjoin(Profile, Profile.id == Book.user_id)
            .where(Book.id == book_id)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        book, full_name, avatar_url = row
        return book, full_name, avatar_url

    async def decrement_available_copies(self, book_id: str, quantity: int) -> bool:
        """Take ``quantity`` copies off a listing if that many are still left.

        The check and the write are a single conditional UPDATE, so two
        concurrent buyers cannot both take the last copy. Nothing is committed
        here; the caller owns the surrounding transaction.

        Args:
            book_id: Listing identifier
            quantity: Number of copies to take

        Returns:
            True when the row was updated, False when too few copies remained
        """
        stmt = (
            update(Book)
            .where((Book.id == book_id) & (Book.available_copies >= quantity))
            .values(available_copies=Book.available_copies - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
