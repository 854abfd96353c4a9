"""
In-process message feed.

``MessageBroker`` fans new messages out to per-subscriber asyncio queues,
keyed by conversation. ``MessageFeed.subscribe`` registers a queue first,
then replays stored messages newer than the subscriber's last seen id, then
forwards live messages, dropping any id it has already yielded. A subscriber
whose queue overflowed resyncs from the store instead of losing messages.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set

from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.conversations import MessageRead

logger = get_logger(__name__)

HistoryLoader = Callable[[Optional[int]], Awaitable[List[MessageRead]]]


@dataclass(eq=False)
class Subscription:
    """Queue of live messages for one subscriber."""

    conversation_id: str
    queue: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=1000))
    overflowed: bool = False


class MessageBroker:
    """Publishes inserted messages to the subscribers of their conversation."""

    def __init__(self, max_queue_size: int = 1000) -> None:
        self.max_queue_size = max_queue_size
        self._subscriptions: Dict[str, Set[Subscription]] = {}

    def publish(self, message: MessageRead) -> int:
        """Deliver ``message`` to every subscriber of its conversation.

        Returns:
            Number of subscribers the message was queued for
        """
        delivered = 0
        for subscription in list(self._subscriptions.get(message.conversation_id, ())):
            try:
                subscription.queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                subscription.overflowed = True
                logger.warning(f"Feed queue full for conversation {message.conversation_id}; subscriber will resync")
        return delivered

    @asynccontextmanager
    async def subscription(self, conversation_id: str) -> AsyncIterator[Subscription]:
        sub = Subscription(conversation_id, asyncio.Queue(maxsize=self.max_queue_size))
        self._subscriptions.setdefault(conversation_id, set()).add(sub)
        logger.debug(f"Subscriber joined conversation {conversation_id}")
        try:
            yield sub
        finally:
            subscribers = self._subscriptions.get(conversation_id)
            if subscribers is not None:
                subscribers.discard(sub)
                if not subscribers:
                    del self._subscriptions[conversation_id]
            logger.debug(f"Subscriber left conversation {conversation_id}")

    def subscriber_count(self, conversation_id: str) -> int:
        return len(self._subscriptions.get(conversation_id, ()))


class MessageFeed:
    """Ordered, duplicate-free message stream for one conversation."""

    def __init__(self, broker: MessageBroker, load_history: HistoryLoader) -> None:
        self.broker = broker
        self.load_history = load_history

    async def subscribe(self, conversation_id: str, since_id: Optional[int] = None) -> AsyncIterator[MessageRead]:
        """Yield messages of ``conversation_id`` stored after ``since_id``, each exactly once.

        History arrives in ``created_at`` order, which need not match id order,
        so duplicates are recognised by id and the replay position is the
        highest id yielded so far. Stops only when the consumer closes the
        iterator.
        """
        async with self.broker.subscription(conversation_id) as sub:
            last_id = since_id
            seen: Set[int] = set()

            def accept(message: MessageRead) -> bool:
                nonlocal last_id
                if message.id in seen:
                    return False
                seen.add(message.id)
                last_id = message.id if last_id is None else max(last_id, message.id)
                return True

            for message in await self.load_history(last_id):
                if accept(message):
                    yield message

            while True:
                if sub.overflowed:
                    sub.overflowed = False
                    while not sub.queue.empty():
                        sub.queue.get_nowait()
                    for message in await self.load_history(last_id):
                        if accept(message):
                            yield message
                    continue

                message = await sub.queue.get()
                if accept(message):
                    yield message


broker = MessageBroker()


def get_broker() -> MessageBroker:
    return broker
