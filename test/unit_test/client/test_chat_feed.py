"""Tests for the reconnecting chat feed client."""

import json
from contextlib import aclosing
from typing import Dict, List

import httpx
import pytest

from bookbridge.client import chat_feed
from bookbridge.client.chat_feed import ChatFeedClient, ChatFeedError, ConversationView

pytestmark = pytest.mark.asyncio

CONV = "conv-1"
BASE = "http://mock-bookbridge"


def _message(message_id: int, sender: str = "seller") -> Dict:
    return {
        "id": message_id,
        "conversation_id": CONV,
        "sender_id": sender,
        "content": f"message {message_id}",
        "read": False,
        "created_at": f"2024-01-01T10:00:{message_id:02d}",
    }


def _sse(*messages: Dict) -> bytes:
    chunks = [": ping\n\n"]
    for message in messages:
        chunks.append(f"event: message\nid: {message['id']}\ndata: {json.dumps(message)}\n\n")
    return "".join(chunks).encode()


def _stream_response(*messages: Dict) -> httpx.Response:
    return httpx.Response(200, content=_sse(*messages), headers={"content-type": "text/event-stream"})


@pytest.fixture
def delays(monkeypatch) -> List[float]:
    recorded: List[float] = []

    async def fake_sleep(delay: float) -> None:
        recorded.append(delay)

    monkeypatch.setattr(chat_feed.asyncio, "sleep", fake_sleep)
    return recorded


def _client(handler, **kwargs) -> ChatFeedClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatFeedClient(BASE, token="tok", client=http, **kwargs)


async def _take(client: ChatFeedClient, count: int, since_id=None) -> List[int]:
    ids: List[int] = []
    async with aclosing(client.listen(CONV, since_id=since_id)) as feed:
        async for message in feed:
            ids.append(message.id)
            if len(ids) == count:
                break
    return ids


async def test_backoff_delay_is_capped():
    client = ChatFeedClient(BASE, client=httpx.AsyncClient(), backoff_initial=0.5, backoff_factor=2.0, backoff_max=3.0)
    assert [client.backoff_delay(n) for n in range(4)] == [0.5, 1.0, 2.0, 3.0]


async def test_reconnect_resyncs_and_deduplicates(delays):
    requests: List[httpx.Request] = []
    streams = iter([_stream_response(_message(1), _message(2)), _stream_response(_message(3), _message(4))])

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        assert request.headers["Authorization"] == "Bearer tok"
        if request.url.path.endswith("/stream"):
            return next(streams)
        assert request.url.params["since_id"] == "2"
        return httpx.Response(200, json=[_message(3)])

    ids = await _take(_client(handler), 4)

    assert ids == [1, 2, 3, 4]
    assert delays == [0.5]
    stream_requests = [r for r in requests if r.url.path.endswith("/stream")]
    assert "Last-Event-ID" not in stream_requests[0].headers
    assert stream_requests[1].headers["Last-Event-ID"] == "3"


async def test_transport_errors_are_retried(delays):
    calls = {"stream": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/stream"):
            calls["stream"] += 1
            if calls["stream"] < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return _stream_response(_message(8))
        return httpx.Response(200, json=[])

    ids = await _take(_client(handler), 1, since_id=7)

    assert ids == [8]
    assert delays == [0.5, 1.0]


async def test_gives_up_after_max_retries(delays):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/stream"):
            return httpx.Response(503)
        return httpx.Response(200, json=[])

    with pytest.raises(ChatFeedError):
        await _take(_client(handler, max_retries=2), 1)
    assert delays == [0.5, 1.0]


async def test_client_errors_are_not_retried(delays):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "conversation conv-1 not found"})

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await _take(_client(handler), 1)
    assert exc_info.value.response.status_code == 404
    assert delays == []


async def test_conversation_view_marks_other_party_messages_read(delays):
    read_calls: List[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/read"):
            read_calls.append(1)
            return httpx.Response(200, json={"updated": 1})
        if path.endswith("/stream"):
            return _stream_response(_message(4, sender="buyer"), _message(5, sender="seller"))
        return httpx.Response(200, json=[_message(2, sender="buyer"), _message(1)])

    view = ConversationView(_client(handler), CONV, user_id="buyer")
    await view.open()
    assert [m.id for m in view.messages] == [1, 2]
    assert len(read_calls) == 1

    assert await view.receive(chat_feed.MessageRead.model_validate(_message(4, sender="buyer")))
    assert len(read_calls) == 1
    assert not await view.receive(chat_feed.MessageRead.model_validate(_message(4, sender="buyer")))

    await view.follow(limit=1)
    assert [m.id for m in view.messages] == [1, 2, 4, 5]
    assert len(read_calls) == 2


async def test_resync_keeps_messages_committed_out_of_id_order(delays):
    # id 6 was stamped before id 5, so history lists 6 first.
    late_id = {**_message(5), "created_at": "2024-01-01T10:00:07"}
    early_id = {**_message(6), "created_at": "2024-01-01T10:00:06"}
    requests: List[httpx.Request] = []
    streams = iter([_stream_response(_message(4)), _stream_response(late_id, _message(7))])

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/stream"):
            return next(streams)
        assert request.url.params["since_id"] == "4"
        return httpx.Response(200, json=[early_id, late_id])

    ids = await _take(_client(handler), 4)

    assert ids == [4, 6, 5, 7]
    stream_requests = [r for r in requests if r.url.path.endswith("/stream")]
    assert stream_requests[1].headers["Last-Event-ID"] == "6"
