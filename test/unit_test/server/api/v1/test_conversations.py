"""Chat endpoints. The live stream is covered at the feed level; here only its guards."""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _setup(client: AsyncClient, signup):
    seller = await signup("seller@example.com", "Seller")
    buyer = await signup("buyer@example.com", "Buyer")
    book = (
        await client.post(
            "/api/v1/books",
            json={
                "title": "The Guide",
                "author": "R. K. Narayan",
                "category": "Fiction",
                "book_type": "novel",
                "mode": "exchange",
            },
            headers=seller,
        )
    ).json()
    return seller, buyer, book


async def test_open_conversation_is_idempotent(client: AsyncClient, signup):
    seller, buyer, book = await _setup(client, signup)

    first = await client.post("/api/v1/conversations", json={"book_id": book["id"]}, headers=buyer)
    second = await client.post("/api/v1/conversations", json={"book_id": book["id"]}, headers=buyer)
    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert first.json()["seller_id"] == book["user_id"]

    own = await client.post("/api/v1/conversations", json={"book_id": book["id"]}, headers=seller)
    assert own.status_code == 400
    missing = await client.post("/api/v1/conversations", json={"book_id": "missing"}, headers=buyer)
    assert missing.status_code == 404


async def test_messages_and_read_state(client: AsyncClient, signup):
    seller, buyer, book = await _setup(client, signup)
    conv = (await client.post("/api/v1/conversations", json={"book_id": book["id"]}, headers=buyer)).json()
    base = f"/api/v1/conversations/{conv['id']}"

    sent = await client.post(f"{base}/messages", json={"content": "  Is it still available?  "}, headers=buyer)
    assert sent.status_code == 201
    assert sent.json()["content"] == "Is it still available?"
    await client.post(f"{base}/messages", json={"content": "Happy to swap for Malgudi Days"}, headers=buyer)

    assert (await client.post(f"{base}/messages", json={"content": "   "}, headers=buyer)).status_code == 422
    too_long = await client.post(f"{base}/messages", json={"content": "x" * 2001}, headers=buyer)
    assert too_long.status_code == 422

    inbox = (await client.get("/api/v1/conversations", headers=seller)).json()
    assert len(inbox) == 1
    assert inbox[0]["unread_count"] == 2
    assert inbox[0]["book_title"] == "The Guide"
    assert inbox[0]["other_party"]["full_name"] == "Buyer"

    history = (await client.get(f"{base}/messages", headers=seller)).json()
    assert [m["content"] for m in history] == ["Is it still available?", "Happy to swap for Malgudi Days"]
    newer = (await client.get(f"{base}/messages", params={"since_id": history[0]["id"]}, headers=seller)).json()
    assert [m["id"] for m in newer] == [history[1]["id"]]

    assert (await client.post(f"{base}/read", headers=buyer)).json() == {"updated": 0}
    assert (await client.post(f"{base}/read", headers=seller)).json() == {"updated": 2}
    assert (await client.post(f"{base}/read", headers=seller)).json() == {"updated": 0}

    detail = (await client.get(base, headers=seller)).json()
    assert detail["unread_count"] == 0


async def test_outsiders_cannot_see_conversation(client: AsyncClient, signup):
    seller, buyer, book = await _setup(client, signup)
    stranger = await signup("stranger@example.com")
    conv = (await client.post("/api/v1/conversations", json={"book_id": book["id"]}, headers=buyer)).json()
    base = f"/api/v1/conversations/{conv['id']}"

    assert (await client.get(base, headers=stranger)).status_code == 404
    assert (await client.get(f"{base}/messages", headers=stranger)).status_code == 404
    assert (await client.post(f"{base}/messages", json={"content": "hi"}, headers=stranger)).status_code == 404
    assert (await client.get("/api/v1/conversations", headers=stranger)).json() == []
    assert (await client.get(base)).status_code == 401


async def test_stream_guards(client: AsyncClient, signup):
    seller, buyer, book = await _setup(client, signup)
    stranger = await signup("stranger@example.com")
    conv = (await client.post("/api/v1/conversations", json={"book_id": book["id"]}, headers=buyer)).json()

    assert (await client.get(f"/api/v1/conversations/{conv['id']}/stream")).status_code == 401
    assert (await client.get(f"/api/v1/conversations/{conv['id']}/stream", headers=stranger)).status_code == 404
    assert (await client.get("/api/v1/conversations/missing/stream", headers=buyer)).status_code == 404
