"""
Conversation endpoints.

Buyers open a thread about a book; both parties read and append messages,
mark the other side's messages read, and follow new messages live over
Server-Sent Events.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Header, Query, Request, status
from sse_starlette.sse import EventSourceResponse

from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.conversations import (
    ConversationCreate,
    ConversationDetail,
    ConversationRead,
    MarkReadResult,
    MessageCreate,
    MessageRead,
)
from bookbridge.server.services.chat import ChatService
from bookbridge.server.services.deps import BrokerDep, ChatServiceDep, SessionFactoryDep, UserDep
from bookbridge.server.services.realtime import MessageFeed

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ConversationRead,
    summary="Open Conversation",
    description="Get or create the caller's conversation with the owner of a book.",
    responses={
        400: {"description": "The caller owns the book"},
        401: {"description": "Sign in required"},
        404: {"description": "Book not found"},
    },
)
async def open_conversation(payload: ConversationCreate, chat: ChatServiceDep) -> ConversationRead:
    return ConversationRead.model_validate(await chat.open_conversation(payload.book_id))


@router.get(
    "",
    response_model=List[ConversationDetail],
    summary="List Conversations",
    description="Conversations the caller takes part in, newest first.",
)
async def list_conversations(chat: ChatServiceDep) -> List[ConversationDetail]:
    return await chat.list_conversations()


@router.get(
    "/{conversation_id}",
    response_model=ConversationDetail,
    summary="Get Conversation",
    description="Conversation with the book title and the other participant's profile.",
    responses={404: {"description": "Conversation not found"}},
)
async def get_conversation(conversation_id: str, chat: ChatServiceDep) -> ConversationDetail:
    return await chat.get_conversation_detail(conversation_id)


@router.get(
    "/{conversation_id}/messages",
    response_model=List[MessageRead],
    summary="Message History",
    description="Messages of a conversation, oldest first.",
)
async def list_messages(
    conversation_id: str,
    chat: ChatServiceDep,
    since_id: Optional[int] = Query(default=None, ge=0, description="Only messages with a greater id"),
) -> List[MessageRead]:
    return [MessageRead.model_validate(m) for m in await chat.history(conversation_id, since_id=since_id)]


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send Message",
    description="Append a message from the caller. Surrounding whitespace is removed.",
    responses={422: {"description": "Empty or overlong message"}},
)
async def send_message(conversation_id: str, payload: MessageCreate, chat: ChatServiceDep) -> MessageRead:
    return MessageRead.model_validate(await chat.send(conversation_id, payload.content))


@router.post(
    "/{conversation_id}/read",
    response_model=MarkReadResult,
    summary="Mark Read",
    description="Mark every unread message from the other participant as read.",
)
async def mark_read(conversation_id: str, chat: ChatServiceDep) -> MarkReadResult:
    return MarkReadResult(updated=await chat.mark_read(conversation_id))


@router.get(
    "/{conversation_id}/stream",
    summary="Stream Messages",
    description="Server-Sent Events feed of new messages in a conversation.",
    responses={
        200: {"description": "SSE stream; each event id is the message id", "content": {"text/event-stream": {}}},
        404: {"description": "Conversation not found"},
    },
)
async def stream_messages(
    conversation_id: str,
    request: Request,
    caller: UserDep,
    chat: ChatServiceDep,
    broker: BrokerDep,
    session_factory: SessionFactoryDep,
    since_id: Optional[int] = Query(default=None, ge=0),
    last_event_id: Optional[str] = Header(default=None, alias="Last-Event-ID"),
):
    """
    Follow a conversation live.

    Messages newer than ``since_id`` (or the ``Last-Event-ID`` header sent by a
    reconnecting EventSource) are replayed first, then new messages are pushed
    as they are sent. The stream ends when the client disconnects.
    """
    await chat.get_conversation(conversation_id)

    if last_event_id and last_event_id.isdigit():
        since_id = max(since_id or 0, int(last_event_id))

    async def load_history(after_id: Optional[int]) -> List[MessageRead]:
        async with session_factory() as session:
            rows = await ChatService(session, caller).history(conversation_id, since_id=after_id)
            return [MessageRead.model_validate(m) for m in rows]

    feed = MessageFeed(broker, load_history)
    logger.info(f"Starting message stream for conversation {conversation_id} (since {since_id})")

    async def event_generator():
        try:
            async for message in feed.subscribe(conversation_id, since_id=since_id):
                if await request.is_disconnected():
                    break
                yield {"event": "message", "id": str(message.id), "data": message.model_dump_json()}
        finally:
            logger.info(f"Message stream closed for conversation {conversation_id}")

    return EventSourceResponse(event_generator(), ping=15)
