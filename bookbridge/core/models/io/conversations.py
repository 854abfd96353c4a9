"""
Conversation I/O models for API requests and responses.

This module contains Pydantic-based I/O schemas for chat threads and messages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .profiles import ProfileRead

MAX_MESSAGE_LENGTH = 2000


class ConversationCreate(BaseModel):
    """Schema for opening (or reopening) a thread about a book."""

    book_id: str = Field(min_length=1, max_length=36)


class ConversationRead(BaseModel):
    """Schema for reading a thread."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    book_id: str
    buyer_id: str
    seller_id: str
    created_at: datetime


class ConversationDetail(ConversationRead):
    """Thread with the book title and the other participant's profile."""

    book_title: Optional[str] = None
    other_party: Optional[ProfileRead] = None
    unread_count: int = 0


class MessageCreate(BaseModel):
    """Schema for appending a message. The sender is always the caller."""

    content: str = Field(description="Message text; surrounding whitespace is dropped")

    @field_validator("content")
    @classmethod
    def _trimmed_and_bounded(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message content cannot be empty")
        if len(value) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"message content cannot exceed {MAX_MESSAGE_LENGTH} characters")
        return value


class MessageRead(BaseModel):
    """Schema for reading a message."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: str
    sender_id: str
    content: str
    read: bool
    created_at: datetime


class MarkReadResult(BaseModel):
    """Result of marking a thread as read."""

    updated: int = Field(description="Number of messages flipped to read")
