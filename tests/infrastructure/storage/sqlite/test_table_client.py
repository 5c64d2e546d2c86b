"""Tests for SQLiteTableClient against a migrated temporary database."""

import pytest

from intellectory.core.exceptions import DatabaseError


class TestSelectAndInsert:
    async def test_insert_fills_defaults(self, sqlite_client):
        rows = await sqlite_client.insert("stock_items", {"team_id": "team-1", "name": "Boxes"})

        assert len(rows) == 1
        assert rows[0]["id"]
        assert rows[0]["color"] == "#3B82F6"
        assert rows[0]["opening_stock"] == 0

    async def test_select_filters_orders_and_limits(self, sqlite_client):
        await sqlite_client.insert(
            "stock_items",
            [
                {"team_id": "team-1", "name": "Tape"},
                {"team_id": "team-1", "name": "Boxes"},
                {"team_id": "team-2", "name": "Labels"},
            ],
        )

        rows = await sqlite_client.select("stock_items", {"team_id": "team-1"}, order_by="name")
        assert [r["name"] for r in rows] == ["Boxes", "Tape"]

        rows = await sqlite_client.select(
            "stock_items", {"team_id": "team-1"}, order_by="name", descending=True, limit=1
        )
        assert [r["name"] for r in rows] == ["Tape"]

    async def test_none_filter_matches_null(self, sqlite_client):
        await sqlite_client.insert(
            "activity_log",
            {"team_id": "team-1", "item_name": "Boxes", "change_description": "x"},
        )

        rows = await sqlite_client.select("activity_log", {"user_id": None})

        assert len(rows) == 1


class TestUpdateUpsertDelete:
    async def test_update_returns_changed_rows(self, sqlite_client):
        (row,) = await sqlite_client.insert("suppliers", {"team_id": "team-1", "name": "Deons"})

        updated = await sqlite_client.update("suppliers", {"balance": 250.0}, {"id": row["id"]})

        assert updated[0]["balance"] == 250.0

    async def test_update_without_match(self, sqlite_client):
        assert await sqlite_client.update("suppliers", {"balance": 1}, {"id": "missing"}) == []

    async def test_upsert_merges_on_conflict(self, sqlite_client):
        row = {"team_id": "team-1", "bin_type_id": "chep", "quantity": 5}
        await sqlite_client.upsert("our_bins", row, ["team_id", "bin_type_id"])
        await sqlite_client.upsert("our_bins", {**row, "quantity": 9}, ["team_id", "bin_type_id"])

        rows = await sqlite_client.select("our_bins", {"team_id": "team-1"})

        assert len(rows) == 1
        assert rows[0]["quantity"] == 9

    async def test_delete_returns_count(self, sqlite_client):
        await sqlite_client.insert(
            "bin_parties",
            [{"team_id": "team-1", "name": "Ziyard"}, {"team_id": "team-1", "name": "Deons"}],
        )

        assert await sqlite_client.delete("bin_parties", {"team_id": "team-1"}) == 2

    async def test_delete_and_update_need_filters(self, sqlite_client):
        with pytest.raises(ValueError):
            await sqlite_client.delete("bin_parties", {})
        with pytest.raises(ValueError):
            await sqlite_client.update("bin_parties", {"name": "x"}, {})


class TestErrors:
    async def test_invalid_identifier(self, sqlite_client):
        with pytest.raises(ValueError, match="Invalid identifier"):
            await sqlite_client.select("stock_items; DROP TABLE teams")
        with pytest.raises(ValueError):
            await sqlite_client.select("stock_items", {"name = name OR 1": 1})

    async def test_constraint_violation_is_database_error(self, sqlite_client):
        with pytest.raises(DatabaseError):
            await sqlite_client.insert(
                "bin_status_counts",
                {"team_id": "team-1", "bin_type_id": "chep", "status_name": "total"},
            )

    async def test_failed_transaction_rolls_back(self, sqlite_client):
        with pytest.raises(DatabaseError):
            await sqlite_client.insert(
                "bin_parties",
                [{"team_id": "team-1", "name": "Ziyard"}, {"team_id": "team-1"}],
            )

        assert await sqlite_client.select("bin_parties") == []

    async def test_ping(self, sqlite_client):
        await sqlite_client.ping()
