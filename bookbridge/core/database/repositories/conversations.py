"""
Conversation and message repositories.

Data access for chat threads and their append-only message log.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.conversations import Conversation, Message
from .base import AsyncBaseRepository, QueryBuilder


class ConversationRepository(AsyncBaseRepository[Conversation]):
    """Repository for conversation data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Conversation)

    async def get_for_book_and_buyer(self, book_id: str, buyer_id: str) -> Optional[Conversation]:
        """Get the thread a buyer opened about a book, if any."""
        stmt = select(Conversation).where((Conversation.book_id == book_id) & (Conversation.buyer_id == buyer_id))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_party(
        self, user_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Conversation]:
        """List threads where ``user_id`` is buyer or seller, newest first."""
        stmt = (
            select(Conversation)
            .where(or_(Conversation.buyer_id == user_id, Conversation.seller_id == user_id))
            .order_by(Conversation.created_at.desc(), Conversation.id)
        )
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class MessageRepository(AsyncBaseRepository[Message]):
    """Repository for chat messages."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Message)

    async def list_for_conversation(self, conversation_id: str, after_id: Optional[int] = None) -> List[Message]:
        """Get the messages of a thread in conversation order.

        Args:
            conversation_id: Thread identifier
            after_id: Only messages with a greater id (used to resync a feed)

        Returns:
            Messages ascending by creation time, ties broken by id
        """
        stmt = select(Message).where(Message.conversation_id == conversation_id)
        if after_id is not None:
            stmt = stmt.where(Message.id > after_id)
        stmt = stmt.order_by(Message.created_at.asc(), Message.id.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_unread_from_others(self, conversation_id: str, reader_id: str) -> List[Message]:
        """Get unread messages of a thread that ``reader_id`` did not send."""
        stmt = select(Message).where(
            (Message.conversation_id == conversation_id)
            & (Message.sender_id != reader_id)
            & (Message.read == False)  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(self, message_ids: Sequence[int]) -> int:
        """Flip ``read`` to true for the given messages that are still unread.

        Returns:
            Number of messages that changed state
        """
        if not message_ids:
            return 0
        stmt = (
            update(Message)
            .where(Message.id.in_(list(message_ids)) & (Message.read == False))  # noqa: E712
            .values(read=True)
        )
        result = await self.session.execute(stmt)
        await self.commit()
        return result.rowcount
