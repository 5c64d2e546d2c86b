"""
Table-backed store for the bin ledger aggregate.

`load_snapshot` reads every bin table for the team and assembles the
display aggregate: partitions, status table with derived totals, mixed
rollups, history, notes and daily totals.
"""

import json
from datetime import date
from typing import Any

from intellectory.config import get_logger
from intellectory.core.entities.bins import (
    BinBalance,
    BinCategory,
    BinHistoryEntry,
    BinParty,
    BinStatus,
    BinStockSnapshot,
    BinTypeDefinition,
    CustomBinType,
    DailyBinTotal,
    DailyTotalsRow,
    HistoryEntryType,
    PartyPosition,
)
from intellectory.core.exceptions import BinTypeNotFoundError
from intellectory.core.interfaces.stores import IBinStore
from intellectory.core.services.bin_calculations import (
    apply_mixed_totals,
    group_todays_movements,
    now_total,
    partition_parties,
    status_table,
)
from intellectory.infrastructure.storage.stores.base import TableStore, load_json, to_row

logger = get_logger(__name__)

DEFAULT_NOTES_TEXT = "Add your notes here..."

# Cleared by a bin reset, children before parents
_RESET_TABLES = [
    "bin_balances",
    "bin_status_counts",
    "bin_history_log",
    "bin_parties",
    "our_bins",
    "daily_bin_totals",
]


def _history_from_row(row: dict[str, Any]) -> BinHistoryEntry:
    return BinHistoryEntry.model_validate({**row, "details": load_json(row.get("details"))})


def _history_to_row(entry: BinHistoryEntry) -> dict[str, Any]:
    row = to_row(entry, exclude={"details"})
    row["details"] = json.dumps(entry.details)
    return row


class TableBinStore(TableStore, IBinStore):
    """IBinStore over an ITableClient."""

    # Aggregate

    async def load_snapshot(
        self,
        team_id: str,
        history_limit: int = 200,
        totals_date: date | None = None,
    ) -> BinStockSnapshot:
        totals_date = totals_date or date.today()

        all_types = await self.list_bin_types(team_id)
        bin_types = [bt for bt in all_types if bt.category is not BinCategory.CUSTOM]
        custom_types = [
            CustomBinType(
                id=bt.id,
                team_id=bt.team_id,
                name=bt.name,
                sub_category=bt.sub_category,
                color=bt.color,
            )
            for bt in all_types
            if bt.category is BinCategory.CUSTOM and bt.sub_category is not None
        ]
        known_ids = [bt.id or "" for bt in all_types]

        parties = await self.list_parties(team_id)
        # Balances of removed bin types stay stored but are not shown
        balances = [b for b in await self.list_balances(team_id) if b.bin_type_id in known_ids]
        owed_to_us, we_owe = partition_parties(parties, balances)

        raw_counts: dict[str, dict[str, int]] = {}
        for row in await self.client.select("bin_status_counts", {"team_id": team_id}):
            raw_counts.setdefault(row["status_name"], {})[row["bin_type_id"]] = int(row["quantity"])
        for status, counts in raw_counts.items():
            raw_counts[status] = apply_mixed_totals(bin_types, custom_types, counts)
        statuses = status_table(raw_counts, known_ids)

        history_rows = await self.client.select(
            "bin_history_log",
            {"team_id": team_id},
            order_by="timestamp",
            descending=True,
            limit=history_limit,
        )
        history = [_history_from_row(row) for row in history_rows]
        note = await self.get_note(team_id)

        our_bins = await self.list_our_bins(team_id)
        openings = {t.bin_type_id: t.opening_total for t in await self.list_daily_totals(team_id, totals_date)}
        daily_totals = [
            DailyTotalsRow(
                bin_type_id=bin_type_id,
                opening_total=openings.get(bin_type_id, 0),
                now_total=now_total(
                    openings.get(bin_type_id, 0),
                    (b.balance for b in balances if b.bin_type_id == bin_type_id),
                    our_bins.get(bin_type_id, 0),
                ),
            )
            for bin_type_id in known_ids
        ]

        return BinStockSnapshot(
            bin_types=bin_types,
            custom_bin_types=custom_types,
            parties=parties,
            statuses=statuses,
            owed_to_us=self._rolled_up(owed_to_us, bin_types, custom_types),
            we_owe=self._rolled_up(we_owe, bin_types, custom_types),
            history=history,
            notes=note.change_description if note else DEFAULT_NOTES_TEXT,
            our_bins=our_bins,
            daily_totals=daily_totals,
            totals_date=totals_date,
            todays_movements=group_todays_movements(history, date.today()),
        )

    @staticmethod
    def _rolled_up(
        positions: list[PartyPosition],
        bin_types: list[BinTypeDefinition],
        custom_types: list[CustomBinType],
    ) -> list[PartyPosition]:
        return [
            position.model_copy(
                update={"bins": apply_mixed_totals(bin_types, custom_types, position.bins)}
            )
            for position in positions
        ]

    # Bin types

    async def list_bin_types(self, team_id: str) -> list[BinTypeDefinition]:
        rows = await self.client.select("bin_types", {"team_id": team_id})
        return [BinTypeDefinition.model_validate(row) for row in rows]

    async def get_bin_type(self, team_id: str, bin_type_id: str) -> BinTypeDefinition | None:
        rows = await self.client.select("bin_types", {"team_id": team_id, "id": bin_type_id}, limit=1)
        return BinTypeDefinition.model_validate(rows[0]) if rows else None

    async def create_bin_types(self, bin_types: list[BinTypeDefinition]) -> list[BinTypeDefinition]:
        if not bin_types:
            return []
        rows = await self.client.insert("bin_types", [to_row(bt) for bt in bin_types])
        return [BinTypeDefinition.model_validate(row) for row in rows]

    async def update_bin_type(
        self, team_id: str, bin_type_id: str, values: dict[str, Any]
    ) -> BinTypeDefinition:
        rows = await self.client.update("bin_types", values, {"team_id": team_id, "id": bin_type_id})
        if not rows:
            raise BinTypeNotFoundError(bin_type_id)
        return BinTypeDefinition.model_validate(rows[0])

    async def delete_bin_type(self, team_id: str, bin_type_id: str) -> None:
        await self.client.delete("bin_types", {"team_id": team_id, "id": bin_type_id})

    # Parties

    async def list_parties(self, team_id: str) -> list[BinParty]:
        rows = await self.client.select("bin_parties", {"team_id": team_id}, order_by="name")
        return [BinParty.model_validate(row) for row in rows]

    async def get_party(self, team_id: str, party_id: str) -> BinParty | None:
        rows = await self.client.select("bin_parties", {"team_id": team_id, "id": party_id}, limit=1)
        return BinParty.model_validate(rows[0]) if rows else None

    async def find_party_by_name(self, team_id: str, name: str) -> BinParty | None:
        wanted = name.strip().lower()
        for party in await self.list_parties(team_id):
            if party.name.lower() == wanted:
                return party
        return None

    async def create_party(self, party: BinParty) -> BinParty:
        rows = await self.client.insert("bin_parties", to_row(party))
        return BinParty.model_validate(rows[0])

    async def delete_party(self, team_id: str, party_id: str) -> None:
        # Explicit for backends without the cascade
        await self.client.delete("bin_balances", {"team_id": team_id, "party_id": party_id})
        await self.client.delete("bin_parties", {"team_id": team_id, "id": party_id})

    # Balances

    async def list_balances(self, team_id: str, party_id: str | None = None) -> list[BinBalance]:
        filters = {"team_id": team_id}
        if party_id is not None:
            filters["party_id"] = party_id
        rows = await self.client.select("bin_balances", filters)
        return [BinBalance.model_validate(row) for row in rows]

    async def get_balance(self, team_id: str, party_id: str, bin_type_id: str) -> BinBalance | None:
        rows = await self.client.select(
            "bin_balances",
            {"team_id": team_id, "party_id": party_id, "bin_type_id": bin_type_id},
            limit=1,
        )
        return BinBalance.model_validate(rows[0]) if rows else None

    async def upsert_balance(self, balance: BinBalance) -> BinBalance:
        rows = await self.client.upsert(
            "bin_balances", to_row(balance), ["party_id", "bin_type_id"]
        )
        return BinBalance.model_validate(rows[0]) if rows else balance

    # Status counts, owned bins, daily totals

    async def upsert_status_count(
        self, team_id: str, bin_type_id: str, status: BinStatus, quantity: int
    ) -> None:
        await self.client.upsert(
            "bin_status_counts",
            {
                "team_id": team_id,
                "bin_type_id": bin_type_id,
                "status_name": status.value,
                "quantity": quantity,
            },
            ["team_id", "bin_type_id", "status_name"],
        )

    async def list_our_bins(self, team_id: str) -> dict[str, int]:
        rows = await self.client.select("our_bins", {"team_id": team_id})
        return {row["bin_type_id"]: int(row["quantity"]) for row in rows}

    async def upsert_our_bins(self, team_id: str, bin_type_id: str, quantity: int) -> None:
        await self.client.upsert(
            "our_bins",
            {"team_id": team_id, "bin_type_id": bin_type_id, "quantity": quantity},
            ["team_id", "bin_type_id"],
        )

    async def list_daily_totals(self, team_id: str, day: date) -> list[DailyBinTotal]:
        rows = await self.client.select(
            "daily_bin_totals", {"team_id": team_id, "day": day.isoformat()}
        )
        return [DailyBinTotal.model_validate(row) for row in rows]

    async def upsert_daily_totals(self, totals: list[DailyBinTotal]) -> None:
        if not totals:
            return
        await self.client.upsert(
            "daily_bin_totals",
            [to_row(total) for total in totals],
            ["team_id", "bin_type_id", "day"],
        )

    # History

    async def add_history(self, entry: BinHistoryEntry) -> BinHistoryEntry:
        rows = await self.client.insert("bin_history_log", _history_to_row(entry))
        return _history_from_row(rows[0])

    async def get_note(self, team_id: str) -> BinHistoryEntry | None:
        rows = await self.client.select(
            "bin_history_log",
            {"team_id": team_id, "type": HistoryEntryType.NOTE.value},
            order_by="timestamp",
            descending=True,
            limit=1,
        )
        return _history_from_row(rows[0]) if rows else None

    async def update_history_text(self, team_id: str, entry_id: str, text: str) -> None:
        await self.client.update(
            "bin_history_log",
            {"change_description": text},
            {"team_id": team_id, "id": entry_id},
        )

    # Bulk

    async def reset(self, team_id: str) -> None:
        for table in _RESET_TABLES:
            deleted = await self.client.delete(table, {"team_id": team_id})
            logger.debug("bin_table_cleared", table=table, team_id=team_id, rows=deleted)
