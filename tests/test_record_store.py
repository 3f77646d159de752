"""Tests for the record source client."""

from __future__ import annotations

import httpx
import pytest

from app.services.records import RecordNotFoundError, RecordStore, RecordStoreError


def _store(handler) -> tuple[RecordStore, httpx.AsyncClient]:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://posts.example.com"
    )
    return RecordStore(client), client


@pytest.mark.anyio("asyncio")
async def test_fetch_collection_skips_malformed_entries(
    caplog: pytest.LogCaptureFixture,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/posts"
        return httpx.Response(
            200,
            json=[
                {"id": 1, "title": "Alpha", "body": "a", "userId": 3},
                {"id": 0, "title": "Zero"},
                "not-a-post",
                {"id": 2, "title": "Beta", "body": "b", "userId": 4},
            ],
        )

    store, client = _store(handler)
    async with client:
        records = await store.fetch_collection()

    assert [record.id for record in records] == [1, 2]
    assert records[0].owner_id == 3
    messages = [record.getMessage() for record in caplog.records]
    skipped = [message for message in messages if "Skipping malformed post" in message]
    assert len(skipped) == 2
    assert any("not-a-post" in message for message in skipped)


@pytest.mark.anyio("asyncio")
async def test_fetch_collection_raises_with_status() -> None:
    store, client = _store(lambda request: httpx.Response(503))
    async with client:
        with pytest.raises(RecordStoreError) as excinfo:
            await store.fetch_collection()

    assert excinfo.value.status == 503
    assert excinfo.value.message == "Failed to fetch posts, status: 503"


@pytest.mark.anyio("asyncio")
async def test_fetch_collection_rejects_non_list_payload() -> None:
    store, client = _store(lambda request: httpx.Response(200, json={"posts": []}))
    async with client:
        with pytest.raises(RecordStoreError):
            await store.fetch_collection()


@pytest.mark.anyio("asyncio")
async def test_fetch_one_maps_404_to_not_found() -> None:
    store, client = _store(lambda request: httpx.Response(404, json={}))
    async with client:
        with pytest.raises(RecordNotFoundError) as excinfo:
            await store.fetch_one(9)

    assert excinfo.value.status == 404


@pytest.mark.anyio("asyncio")
async def test_fetch_one_returns_raw_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/posts/7"
        return httpx.Response(200, json={"id": 7, "title": "Seven"})

    store, client = _store(handler)
    async with client:
        payload = await store.fetch_one(7)

    assert payload == {"id": 7, "title": "Seven"}


@pytest.mark.anyio("asyncio")
async def test_fetch_one_returns_none_for_non_json_body() -> None:
    store, client = _store(lambda request: httpx.Response(200, text="<html>"))
    async with client:
        assert await store.fetch_one(7) is None


@pytest.mark.anyio("asyncio")
async def test_transport_errors_become_store_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store, client = _store(handler)
    async with client:
        with pytest.raises(RecordStoreError) as excinfo:
            await store.fetch_one(1)

    assert excinfo.value.status is None
    assert "connection refused" in excinfo.value.message
