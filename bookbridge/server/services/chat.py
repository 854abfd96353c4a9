"""
Buyer and seller chat.

Threads are opened by a buyer about a book; the seller is always the book's
owner. Messages are append-only and ordered by creation time, ties broken by
the message id. The only change a message ever sees is its recipient marking
it read.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bookbridge.core.database.entities.conversations import Conversation, Message
from bookbridge.core.database.repositories import (
    BookRepository,
    ConversationRepository,
    MessageRepository,
    ProfileRepository,
)
from bookbridge.core.errors import (
    AuthenticationError,
    ConstraintViolationError,
    InvalidOperationError,
    NotFoundError,
)
from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.conversations import (
    MAX_MESSAGE_LENGTH,
    ConversationDetail,
    MessageRead,
)
from bookbridge.core.models.io.profiles import ProfileRead
from bookbridge.core.monitoring import log_message_sent
from bookbridge.core.policy import Caller, Operation, Resource, enforce, evaluate, visible

from .realtime import MessageBroker

logger = get_logger(__name__)


class ChatService:
    """Service for conversations and their messages."""

    def __init__(self, session: AsyncSession, caller: Caller, broker: Optional[MessageBroker] = None) -> None:
        self.session = session
        self.caller = caller
        self.broker = broker
        self.books = BookRepository(session)
        self.conversations = ConversationRepository(session)
        self.messages = MessageRepository(session)
        self.profiles = ProfileRepository(session)

    def _require_user(self) -> str:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        return self.caller.user_id

    async def open_conversation(self, book_id: str) -> Conversation:
        """Get or create the caller's thread about ``book_id``.

        Raises:
            NotFoundError: The book does not exist.
            InvalidOperationError: The caller owns the book.
        """
        buyer_id = self._require_user()
        book = await self.books.get_by_id(book_id)
        if book is None:
            raise NotFoundError("book", book_id)
        if book.user_id == buyer_id:
            raise InvalidOperationError("You cannot start a conversation about your own book")

        existing = await self.conversations.get_for_book_and_buyer(book_id, buyer_id)
        if existing is not None:
            return existing

        conversation = Conversation(book_id=book_id, buyer_id=buyer_id, seller_id=book.user_id)
        enforce(Resource.conversations, Operation.insert, self.caller, new=conversation)
        try:
            conversation = await self.conversations.create(conversation)
        except ConstraintViolationError:
            # Another request opened the same thread first.
            existing = await self.conversations.get_for_book_and_buyer(book_id, buyer_id)
            if existing is None:
                raise
            return existing
        logger.info(f"Conversation {conversation.id} opened on book {book_id}")
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation:
        """Get a thread the caller takes part in; any other thread is reported as missing."""
        self._require_user()
        conversation = await self.conversations.get_by_id(conversation_id)
        if conversation is None or not evaluate(
            Resource.conversations, Operation.select, self.caller, existing=conversation
        ).allowed:
            raise NotFoundError("conversation", conversation_id)
        return conversation

    async def list_conversations(self) -> List[ConversationDetail]:
        user_id = self._require_user()
        rows = visible(Resource.conversations, self.caller, await self.conversations.list_for_party(user_id))
        return [await self._detail(conversation) for conversation in rows]

    async def get_conversation_detail(self, conversation_id: str) -> ConversationDetail:
        return await self._detail(await self.get_conversation(conversation_id))

    async def history(self, conversation_id: str, since_id: Optional[int] = None) -> List[Message]:
        """Messages of a thread, ascending by creation time then id."""
        conversation = await self.get_conversation(conversation_id)
        rows = await self.messages.list_for_conversation(conversation.id, after_id=since_id)
        return visible(Resource.messages, self.caller, rows, related={"conversation": conversation})

    async def send(self, conversation_id: str, content: str) -> Message:
        """Append a message from the caller and publish it to live subscribers."""
        conversation = await self.get_conversation(conversation_id)
        text = content.strip()
        if not text:
            raise InvalidOperationError("Message content cannot be empty")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidOperationError(f"Message content cannot exceed {MAX_MESSAGE_LENGTH} characters")

        message = Message(conversation_id=conversation.id, sender_id=self.caller.user_id, content=text)
        enforce(Resource.messages, Operation.insert, self.caller, new=message, related={"conversation": conversation})
        message = await self.messages.create(message)
        log_message_sent(conversation.id, message.id, len(text))

        if self.broker is not None:
            self.broker.publish(MessageRead.model_validate(message))
        return message

    async def mark_read(self, conversation_id: str) -> int:
        """Mark every unread message from the other party as read.

        Returns:
            Number of messages flipped; zero when nothing was unread
        """
        conversation = await self.get_conversation(conversation_id)
        related = {"conversation": conversation}

        candidates = await self.messages.list_unread_from_others(conversation.id, self.caller.user_id)
        allowed = [
            message.id
            for message in candidates
            if evaluate(
                Resource.messages,
                Operation.update,
                self.caller,
                existing=message,
                new={**message.model_dump(), "read": True},
                related=related,
            ).allowed
        ]
        updated = await self.messages.mark_read(allowed)
        if updated:
            logger.debug(f"Marked {updated} messages read in conversation {conversation.id}")
        return updated

    async def _detail(self, conversation: Conversation) -> ConversationDetail:
        book = await self.books.get_by_id(conversation.book_id)
        other = await self.profiles.get_by_id(conversation.other_party(self.caller.user_id))
        unread = await self.messages.list_unread_from_others(conversation.id, self.caller.user_id)
        return ConversationDetail.model_validate(
            {
                **conversation.model_dump(),
                "book_title": book.title if book is not None else None,
                "other_party": ProfileRead.model_validate(other) if other is not None else None,
                "unread_count": len(unread),
            }
        )
