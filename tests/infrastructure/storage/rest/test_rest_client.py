"""Tests for RestTableClient using httpx.MockTransport."""

import json

import httpx
import pytest

from intellectory.core.exceptions import DatabaseError
from intellectory.infrastructure.storage.rest.client import RestTableClient


def _client(handler) -> RestTableClient:
    return RestTableClient(
        base_url="https://store.example.com/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    """Request shape of each table operation."""

    async def test_select_params_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=[{"id": "1", "name": "Boxes"}])

        client = _client(handler)
        rows = await client.select(
            "stock_items", {"team_id": "team-1", "category": None}, order_by="name", descending=True, limit=5
        )

        request = seen["request"]
        assert request.url.path == "/rest/v1/stock_items"
        assert request.url.params["team_id"] == "eq.team-1"
        assert request.url.params["category"] == "is.null"
        assert request.url.params["order"] == "name.desc"
        assert request.url.params["limit"] == "5"
        assert request.headers["apikey"] == "secret"
        assert request.headers["authorization"] == "Bearer secret"
        assert rows == [{"id": "1", "name": "Boxes"}]
        await client.close()

    async def test_upsert_merges_duplicates(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(201, json=json.loads(request.content))

        client = _client(handler)
        rows = await client.upsert("our_bins", [{"team_id": "t", "quantity": 3}], ["team_id", "bin_type_id"])

        request = seen["request"]
        assert request.method == "POST"
        assert request.url.params["on_conflict"] == "team_id,bin_type_id"
        assert "resolution=merge-duplicates" in request.headers["prefer"]
        assert rows == [{"team_id": "t", "quantity": 3}]

    async def test_update_single_object_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PATCH"
            assert request.url.params["id"] == "eq.s1"
            return httpx.Response(200, json={"id": "s1", "balance": 10})

        rows = await _client(handler).update("suppliers", {"balance": 10}, {"id": "s1"})

        assert rows == [{"id": "s1", "balance": 10}]

    async def test_delete_counts_returned_rows(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "DELETE"
            return httpx.Response(200, json=[{"id": "a"}, {"id": "b"}])

        assert await _client(handler).delete("bin_parties", {"team_id": "t"}) == 2

    async def test_empty_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        assert await _client(handler).insert("activity_log", {"team_id": "t"}) == []


class TestErrors:
    async def test_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409, text="duplicate key value violates unique constraint")

        with pytest.raises(DatabaseError, match="409"):
            await _client(handler).insert("bin_parties", {"team_id": "t", "name": "x"})

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DatabaseError, match="connection refused"):
            await _client(handler).ping()

    async def test_filters_required_for_writes(self):
        client = _client(lambda request: httpx.Response(200, json=[]))

        with pytest.raises(ValueError):
            await client.delete("bin_parties", {})
        with pytest.raises(ValueError):
            await client.update("bin_parties", {"name": "x"}, {})

    async def test_invalid_table_name(self):
        client = _client(lambda request: httpx.Response(200, json=[]))

        with pytest.raises(ValueError):
            await client.select("../teams")
