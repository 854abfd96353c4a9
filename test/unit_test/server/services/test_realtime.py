"""Live message feed: replay, dedupe and overflow resync."""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

import pytest

from bookbridge.core.models.io.conversations import MessageRead
from bookbridge.server.services.realtime import MessageBroker, MessageFeed

pytestmark = pytest.mark.asyncio


def _message(message_id: int, conversation_id: str = "c1") -> MessageRead:
    return MessageRead(
        id=message_id,
        conversation_id=conversation_id,
        sender_id="alice",
        content=f"m{message_id}",
        read=False,
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


class FakeStore:
    def __init__(self, messages: List[MessageRead]) -> None:
        self.messages = messages
        self.calls: List[Optional[int]] = []

    async def load(self, after_id: Optional[int]) -> List[MessageRead]:
        self.calls.append(after_id)
        return [m for m in self.messages if after_id is None or m.id > after_id]


async def _take(iterator, count: int) -> List[int]:
    ids = []
    async for message in iterator:
        ids.append(message.id)
        if len(ids) == count:
            break
    await iterator.aclose()
    return ids


async def test_replays_history_then_forwards_live_without_duplicates():
    broker = MessageBroker()
    store = FakeStore([_message(1), _message(2)])
    feed = MessageFeed(broker, store.load)
    stream = feed.subscribe("c1", since_id=None)

    async def publish_later():
        while broker.subscriber_count("c1") == 0:
            await asyncio.sleep(0)
        broker.publish(_message(2))  # already replayed
        broker.publish(_message(3))
        broker.publish(_message(3, conversation_id="other"))

    publisher = asyncio.create_task(publish_later())
    ids = await asyncio.wait_for(_take(stream, 3), timeout=2)
    await publisher

    assert ids == [1, 2, 3]
    assert broker.subscriber_count("c1") == 0


async def test_since_id_skips_already_seen_messages():
    store = FakeStore([_message(1), _message(2), _message(3)])
    feed = MessageFeed(MessageBroker(), store.load)
    ids = await asyncio.wait_for(_take(feed.subscribe("c1", since_id=1), 2), timeout=2)
    assert ids == [2, 3]
    assert store.calls == [1]


async def test_overflowed_subscriber_resyncs_from_store():
    broker = MessageBroker(max_queue_size=1)
    store = FakeStore([])
    feed = MessageFeed(broker, store.load)
    stream = feed.subscribe("c1")

    first = asyncio.create_task(stream.__anext__())
    while broker.subscriber_count("c1") == 0:
        await asyncio.sleep(0)
    store.messages = [_message(1), _message(2), _message(3)]
    broker.publish(_message(1))
    assert (await asyncio.wait_for(first, timeout=2)).id == 1

    broker.publish(_message(2))
    broker.publish(_message(3))  # queue full: subscriber must resync

    ids = await asyncio.wait_for(_take(stream, 2), timeout=2)
    assert ids == [2, 3]


async def test_history_out_of_id_order_is_not_dropped():
    broker = MessageBroker()
    early_id = _message(6).model_copy(update={"created_at": datetime(2025, 1, 1, 0, 0, 1, tzinfo=timezone.utc)})
    late_id = _message(5).model_copy(update={"created_at": datetime(2025, 1, 1, 0, 0, 2, tzinfo=timezone.utc)})
    # Stored in created_at order: id 6 was stamped before id 5.
    store = FakeStore([early_id, late_id])
    feed = MessageFeed(broker, store.load)
    stream = feed.subscribe("c1", since_id=4)

    async def publish_later():
        while broker.subscriber_count("c1") == 0:
            await asyncio.sleep(0)
        broker.publish(late_id)
        broker.publish(_message(7))

    publisher = asyncio.create_task(publish_later())
    ids = await asyncio.wait_for(_take(stream, 3), timeout=2)
    await publisher

    assert ids == [6, 5, 7]
