"""Table-backed stores for stock items, the activity log and suppliers."""

from typing import Any

from intellectory.config import get_logger
from intellectory.core.entities.stock import ActivityLogEntry, CreditTransaction, StockItem, Supplier
from intellectory.core.exceptions import RecordNotFoundError, StockItemNotFoundError
from intellectory.core.interfaces.stores import IActivityLogStore, IStockStore, ISupplierStore
from intellectory.infrastructure.storage.stores.base import TableStore, to_row

logger = get_logger(__name__)


class TableStockStore(TableStore, IStockStore):
    async def list_items(self, team_id: str) -> list[StockItem]:
        rows = await self.client.select("stock_items", {"team_id": team_id}, order_by="name")
        return [StockItem.model_validate(row) for row in rows]

    async def get_item(self, team_id: str, item_id: str) -> StockItem | None:
        rows = await self.client.select(
            "stock_items", {"team_id": team_id, "id": item_id}, limit=1
        )
        return StockItem.model_validate(rows[0]) if rows else None

    async def find_by_name(self, team_id: str, name: str) -> StockItem | None:
        wanted = name.strip().lower()
        for item in await self.list_items(team_id):
            if item.name.lower() == wanted:
                return item
        return None

    async def create_item(self, item: StockItem) -> StockItem:
        rows = await self.client.insert("stock_items", to_row(item))
        created = StockItem.model_validate(rows[0])
        logger.debug("stock_item_created", item_id=created.id, name=created.name)
        return created

    async def update_item(self, team_id: str, item_id: str, values: dict[str, Any]) -> StockItem:
        rows = await self.client.update(
            "stock_items", values, {"team_id": team_id, "id": item_id}
        )
        if not rows:
            raise StockItemNotFoundError(item_id)
        return StockItem.model_validate(rows[0])

    async def upsert_items(self, items: list[StockItem]) -> list[StockItem]:
        rows = await self.client.upsert("stock_items", [to_row(i) for i in items], ["id"])
        return [StockItem.model_validate(row) for row in rows]

    async def delete_item(self, team_id: str, item_id: str) -> None:
        await self.client.delete("stock_items", {"team_id": team_id, "id": item_id})

    async def delete_all(self, team_id: str) -> None:
        await self.client.delete("stock_items", {"team_id": team_id})


class TableActivityLogStore(TableStore, IActivityLogStore):
    async def add_entry(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        rows = await self.client.insert("activity_log", to_row(entry))
        return ActivityLogEntry.model_validate(rows[0])

    async def list_entries(self, team_id: str, limit: int | None = None) -> list[ActivityLogEntry]:
        rows = await self.client.select(
            "activity_log",
            {"team_id": team_id},
            order_by="timestamp",
            descending=True,
            limit=limit,
        )
        return [ActivityLogEntry.model_validate(row) for row in rows]

    async def delete_all(self, team_id: str) -> None:
        await self.client.delete("activity_log", {"team_id": team_id})


class TableSupplierStore(TableStore, ISupplierStore):
    async def list_suppliers(self, team_id: str) -> list[Supplier]:
        rows = await self.client.select("suppliers", {"team_id": team_id}, order_by="name")
        return [Supplier.model_validate(row) for row in rows]

    async def create_supplier(self, supplier: Supplier) -> Supplier:
        rows = await self.client.insert("suppliers", to_row(supplier))
        return Supplier.model_validate(rows[0])

    async def set_balance(self, team_id: str, supplier_id: str, balance: float) -> Supplier:
        rows = await self.client.update(
            "suppliers", {"balance": balance}, {"team_id": team_id, "id": supplier_id}
        )
        if not rows:
            raise RecordNotFoundError("Supplier", supplier_id)
        return Supplier.model_validate(rows[0])

    async def add_transaction(self, transaction: CreditTransaction) -> CreditTransaction:
        rows = await self.client.insert("credit_transactions", to_row(transaction))
        return CreditTransaction.model_validate(rows[0])

    async def list_transactions(self, team_id: str) -> list[CreditTransaction]:
        rows = await self.client.select(
            "credit_transactions", {"team_id": team_id}, order_by="created_at", descending=True
        )
        return [CreditTransaction.model_validate(row) for row in rows]

    async def delete_all(self, team_id: str) -> None:
        await self.client.delete("credit_transactions", {"team_id": team_id})
        await self.client.delete("suppliers", {"team_id": team_id})
