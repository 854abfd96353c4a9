"""Chat feed client.

Talks to the conversation endpoints with ``httpx.AsyncClient`` and follows
the Server-Sent Events stream of a conversation. ``ChatFeedClient.listen``
keeps the feed alive across disconnects:

- on a dropped or failed stream it waits ``backoff_initial * backoff_factor**n``
  seconds (capped at ``backoff_max``), for at most ``max_retries`` attempts in a row;
- before resubscribing it fetches the history newer than the last message it
  yielded, so nothing sent while disconnected is lost;
- messages are yielded once each, in the order the server returns them;
  the reconnect position is the highest id seen so far.

``ConversationView`` is the consumer side of a chat screen: it keeps the
ordered message list and marks the other party's messages read.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from typing import AsyncIterator, Dict, List, Optional, Set

import httpx

from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.conversations import MessageRead

logger = get_logger(__name__)

API_PREFIX = "/api/v1/conversations"

# Client errors worth retrying; anything else in the 4xx range is final.
_RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


class ChatFeedError(Exception):
    """Raised when the feed cannot be (re)established."""


def _retryable(status_code: int) -> bool:
    return status_code >= 500 or status_code in _RETRYABLE_CLIENT_STATUSES


class ChatFeedClient:
    """Conversation API client with a self-healing live feed."""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: int = 5,
        backoff_initial: float = 0.5,
        backoff_factor: float = 2.0,
        backoff_max: float = 8.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))
        self._owns_client = client is None
        self._token = token
        self.max_retries = max_retries
        self.backoff_initial = backoff_initial
        self.backoff_factor = backoff_factor
        self.backoff_max = backoff_max

    def _url(self, path: str) -> str:
        return f"{self._base_url}{API_PREFIX}{path}"

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"} if self._token else {}

    def backoff_delay(self, attempt: int) -> float:
        """Delay before reconnect attempt ``attempt`` (0-based)."""
        return min(self.backoff_initial * (self.backoff_factor**attempt), self.backoff_max)

    async def history(self, conversation_id: str, since_id: Optional[int] = None) -> List[MessageRead]:
        params = {"since_id": since_id} if since_id is not None else None
        response = await self._client.get(
            self._url(f"/{conversation_id}/messages"), params=params, headers=self._headers()
        )
        response.raise_for_status()
        return [MessageRead.model_validate(item) for item in response.json()]

    async def send(self, conversation_id: str, content: str) -> MessageRead:
        response = await self._client.post(
            self._url(f"/{conversation_id}/messages"), json={"content": content}, headers=self._headers()
        )
        response.raise_for_status()
        return MessageRead.model_validate(response.json())

    async def mark_read(self, conversation_id: str) -> int:
        response = await self._client.post(self._url(f"/{conversation_id}/read"), headers=self._headers())
        response.raise_for_status()
        return int(response.json()["updated"])

    async def listen(self, conversation_id: str, since_id: Optional[int] = None) -> AsyncIterator[MessageRead]:
        """Yield new messages of a conversation until the consumer stops iterating.

        Raises:
            httpx.HTTPStatusError: The server refused the feed (401, 403, 404, ...).
            ChatFeedError: ``max_retries`` reconnect attempts in a row failed.
        """
        last_id = since_id
        seen: Set[int] = set()
        attempt = 0
        resync = False

        def accept(message: MessageRead) -> bool:
            nonlocal last_id
            if message.id in seen:
                return False
            seen.add(message.id)
            last_id = message.id if last_id is None else max(last_id, message.id)
            return True

        while True:
            error: Optional[Exception] = None
            try:
                if resync:
                    for message in await self.history(conversation_id, since_id=last_id):
                        if accept(message):
                            yield message
                async for message in self._stream(conversation_id, last_id):
                    attempt = 0
                    if accept(message):
                        yield message
            except httpx.HTTPStatusError as e:
                if not _retryable(e.response.status_code):
                    raise
                error = e
            except httpx.TransportError as e:
                error = e

            if attempt >= self.max_retries:
                raise ChatFeedError(
                    f"Chat feed for conversation {conversation_id} lost after {attempt} reconnect attempts"
                ) from error

            delay = self.backoff_delay(attempt)
            attempt += 1
            logger.warning(
                "Chat feed %s; reconnecting in %ss (attempt %s/%s)",
                "error" if error is not None else "ended",
                delay,
                attempt,
                self.max_retries,
            )
            await asyncio.sleep(delay)
            resync = True

    async def _stream(self, conversation_id: str, since_id: Optional[int]) -> AsyncIterator[MessageRead]:
        headers = {**self._headers(), "Accept": "text/event-stream"}
        if since_id is not None:
            headers["Last-Event-ID"] = str(since_id)
        request = self._client.build_request("GET", self._url(f"/{conversation_id}/stream"), headers=headers)
        response = await self._client.send(request, stream=True)
        try:
            response.raise_for_status()
            event = "message"
            data: List[str] = []
            async for line in response.aiter_lines():
                if not line:
                    if data and event == "message":
                        yield MessageRead.model_validate_json("\n".join(data))
                    event, data = "message", []
                    continue
                if line.startswith(":"):
                    continue
                name, _, value = line.partition(":")
                value = value[1:] if value.startswith(" ") else value
                if name == "event":
                    event = value
                elif name == "data":
                    data.append(value)
        finally:
            await response.aclose()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class ConversationView:
    """Ordered message list for one open conversation.

    Opening the view loads the history and marks it read once; afterwards
    every message from the other party that arrives triggers a mark-read.
    """

    def __init__(self, client: ChatFeedClient, conversation_id: str, user_id: str) -> None:
        self.client = client
        self.conversation_id = conversation_id
        self.user_id = user_id
        self.messages: List[MessageRead] = []
        self._seen: set[int] = set()

    @property
    def last_id(self) -> Optional[int]:
        return self.messages[-1].id if self.messages else None

    async def open(self) -> None:
        for message in await self.client.history(self.conversation_id):
            self._append(message)
        await self.client.mark_read(self.conversation_id)

    async def receive(self, message: MessageRead) -> bool:
        """Add an incoming message. Returns False for a duplicate."""
        if not self._append(message):
            return False
        if message.sender_id != self.user_id:
            await self.client.mark_read(self.conversation_id)
        return True

    async def follow(self, limit: Optional[int] = None) -> None:
        """Consume the live feed; stops after ``limit`` new messages when given."""
        received = 0
        async with aclosing(self.client.listen(self.conversation_id, since_id=self.last_id)) as feed:
            async for message in feed:
                if await self.receive(message):
                    received += 1
                if limit is not None and received >= limit:
                    return

    def _append(self, message: MessageRead) -> bool:
        if message.id in self._seen:
            return False
        self._seen.add(message.id)
        self.messages.append(message)
        self.messages.sort(key=lambda m: (m.created_at, m.id))
        return True
