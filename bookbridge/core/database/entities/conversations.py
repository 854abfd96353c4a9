"""
Conversation and message entity models.

A conversation links one book, one buyer and one seller. Messages are
append-only; the only mutation is the recipient flipping ``read`` to true.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class Conversation(Base, table=True):
    """Chat thread between a buyer and the seller of a book.

    Table: conversations
    """

    __tablename__ = "conversations"
    __table_args__ = (UniqueConstraint("book_id", "buyer_id", name="uq_conversations_book_buyer"),)

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=36)
    book_id: str = Field(foreign_key="books.id", ondelete="CASCADE", index=True, max_length=36)
    buyer_id: str = Field(index=True, max_length=36)
    seller_id: str = Field(index=True, max_length=36)
    created_at: datetime = Field(default_factory=utc_now)

    def other_party(self, user_id: str) -> str:
        """Return the participant that is not ``user_id``."""
        return self.seller_id if user_id == self.buyer_id else self.buyer_id

    def __repr__(self) -> str:
        return f"Conversation(id={self.id}, book_id={self.book_id})"


class Message(Base, table=True):
    """Single chat message within a conversation.

    The integer id grows with insertion order and breaks ``created_at`` ties.

    Table: messages
    """

    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: str = Field(foreign_key="conversations.id", ondelete="CASCADE", index=True, max_length=36)
    sender_id: str = Field(max_length=36)
    content: str
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Message(id={self.id}, conversation_id={self.conversation_id}, sender_id={self.sender_id})"
