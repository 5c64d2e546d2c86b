"""
Stock service.

Daily counters, additions with optional supplier credit, edits, deletes
and the "new day" rollover. Each mutation writes an activity log entry;
a failed log write is reported as a warning on the result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from intellectory.config import get_logger
from intellectory.core.entities.stock import (
    ActivityLogEntry,
    CreditTransaction,
    StockField,
    StockItem,
    StockSummary,
    Supplier,
)
from intellectory.core.entities.team import SessionContext
from intellectory.core.exceptions import (
    ConfirmationRequiredError,
    StockItemNotFoundError,
    StorageError,
    ValidationError,
)
from intellectory.core.interfaces.stores import IActivityLogStore, IStockStore, ISupplierStore

logger = get_logger(__name__)

COLOR_PALETTE = [
    "#10B981", "#3B82F6", "#F97316", "#EC4899", "#8B5CF6", "#F59E0B", "#6366F1", "#EF4444",
    "#14b8a6", "#06b6d4", "#0ea5e9", "#f43f5e", "#d946ef", "#84cc16", "#eab308", "#64748b",
]

ALL_ITEMS = "All Items"


class PriceDecision(str, Enum):
    """Answer to a price mismatch when adding to an existing item."""

    KEEP = "keep"
    UPDATE = "update"


@dataclass
class StockChange:
    """Outcome of a stock mutation."""

    item: StockItem | None = None
    items: list[StockItem] = field(default_factory=list)
    transaction: CreditTransaction | None = None
    changed: bool = True
    warnings: list[str] = field(default_factory=list)


def format_number(value: float) -> str:
    """Render whole numbers without a trailing `.0`."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


class StockService:
    """Stock items, suppliers and the activity log of one team."""

    def __init__(
        self,
        stock_store: IStockStore,
        activity_store: IActivityLogStore,
        supplier_store: ISupplierStore,
        price_tolerance: float = 0.001,
        default_alert_level: float = 100,
    ):
        self._stock = stock_store
        self._activity = activity_store
        self._suppliers = supplier_store
        self._price_tolerance = price_tolerance
        self._default_alert_level = default_alert_level

    # Reads

    async def list_items(self, ctx: SessionContext) -> list[StockItem]:
        return await self._stock.list_items(ctx.team_id)

    async def summary(self, ctx: SessionContext) -> StockSummary:
        return StockSummary.from_items(await self._stock.list_items(ctx.team_id))

    async def low_stock(self, ctx: SessionContext) -> list[StockItem]:
        return [item for item in await self._stock.list_items(ctx.team_id) if item.is_low_stock]

    async def activity(self, ctx: SessionContext, limit: int | None = None) -> list[ActivityLogEntry]:
        return await self._activity.list_entries(ctx.team_id, limit=limit)

    async def suppliers(self, ctx: SessionContext) -> list[Supplier]:
        return await self._suppliers.list_suppliers(ctx.team_id)

    async def transactions(self, ctx: SessionContext) -> list[CreditTransaction]:
        return await self._suppliers.list_transactions(ctx.team_id)

    async def find_item(self, ctx: SessionContext, name: str) -> StockItem | None:
        return await self._stock.find_by_name(ctx.team_id, name)

    # Mutations

    async def update_field(
        self,
        ctx: SessionContext,
        item_id: str,
        stock_field: StockField,
        value: float,
    ) -> StockChange:
        """Set one numeric field. Unchanged values write nothing."""
        item = await self._require_item(ctx, item_id)
        if getattr(item, stock_field.value) == value:
            return StockChange(item=item, changed=False)

        updated = await self._stock.update_item(ctx.team_id, item_id, {stock_field.value: value})
        warnings = await self._log(
            ctx, item.name, f"Set '{stock_field.label}' to {format_number(value)}"
        )
        logger.info(
            "stock_field_updated",
            team_id=ctx.team_id,
            item=item.name,
            field=stock_field.value,
            value=value,
        )
        return StockChange(item=updated, warnings=warnings)

    async def add_stock(
        self,
        ctx: SessionContext,
        name: str,
        quantity: float,
        price: float,
        supplier: str | None = None,
        alert_level: float | None = None,
        color: str | None = None,
        category: str = "",
        price_decision: PriceDecision | None = None,
    ) -> StockChange:
        """
        Add quantity to an item, creating it if needed.

        With a supplier the purchase is on credit: a transaction is recorded
        and its value added to the supplier's balance.

        Raises:
            ConfirmationRequiredError: existing item priced differently and
                no `price_decision` given.
        """
        name = name.strip()
        if not name:
            raise ValidationError("name", "is required")
        if quantity <= 0:
            raise ValidationError("quantity", "must be greater than zero", quantity)
        if price < 0:
            raise ValidationError("price", "must not be negative", price)
        supplier = supplier.strip() if supplier else None

        existing = await self._stock.find_by_name(ctx.team_id, name)

        if existing is not None:
            price_differs = abs(existing.price - price) > self._price_tolerance
            if price_differs and price_decision is None:
                raise ConfirmationRequiredError(
                    f"'{existing.name}' is currently priced at {format_number(existing.price)}. "
                    f"Keep the existing price or update it to {format_number(price)}?",
                    reason="price_change",
                    pending={
                        "name": name,
                        "quantity": quantity,
                        "price": price,
                        "supplier": supplier,
                        "alert_level": alert_level,
                        "color": color,
                        "category": category,
                    },
                    current_price=existing.price,
                    new_price=price,
                )
            values: dict[str, Any] = {"added_today": existing.added_today + quantity}
            if price_decision is PriceDecision.UPDATE:
                values["price"] = price
            item = await self._stock.update_item(ctx.team_id, existing.id or "", values)
        else:
            if color is None:
                count = len(await self._stock.list_items(ctx.team_id))
                color = COLOR_PALETTE[count % len(COLOR_PALETTE)]
            item = await self._stock.create_item(
                StockItem(
                    team_id=ctx.team_id,
                    name=name,
                    category=category,
                    opening_stock=0,
                    added_today=quantity,
                    alert_level=self._default_alert_level if alert_level is None else alert_level,
                    price=price,
                    color=color,
                )
            )

        item_name = existing.name if existing else name
        transaction = None
        if supplier:
            transaction = await self._record_credit(ctx, supplier, item_name, quantity, price)
            description = (
                f"Added {format_number(quantity)} units of '{item_name}' via credit from {supplier}."
            )
        else:
            description = f"Added {format_number(quantity)} units of '{item_name}' via cash."

        warnings = await self._log(ctx, item_name, description)
        logger.info(
            "stock_added",
            team_id=ctx.team_id,
            item=item_name,
            quantity=quantity,
            price=price,
            supplier=supplier,
            created=existing is None,
        )
        return StockChange(item=item, transaction=transaction, warnings=warnings)

    async def edit_details(
        self,
        ctx: SessionContext,
        item_id: str,
        name: str,
        category: str,
        color: str,
    ) -> StockChange:
        item = await self._require_item(ctx, item_id)
        name = name.strip()
        if not name:
            raise ValidationError("name", "is required")

        updated = await self._stock.update_item(
            ctx.team_id, item_id, {"name": name, "category": category, "color": color}
        )

        changes = []
        if name != item.name:
            changes.append(f"renamed to '{name}'")
        if category != item.category:
            changes.append(f"changed category to '{category}'")
        if color != item.color:
            changes.append("changed color")

        warnings: list[str] = []
        if changes:
            warnings = await self._log(
                ctx, item.name, f"Item details updated: {', '.join(changes)}."
            )
        return StockChange(item=updated, changed=bool(changes), warnings=warnings)

    async def delete_item(self, ctx: SessionContext, item_id: str) -> StockChange:
        item = await self._require_item(ctx, item_id)
        await self._stock.delete_item(ctx.team_id, item_id)
        warnings = await self._log(ctx, item.name, "Item permanently deleted.")
        logger.info("stock_item_deleted", team_id=ctx.team_id, item=item.name)
        return StockChange(item=item, warnings=warnings)

    async def new_day(self, ctx: SessionContext) -> StockChange:
        """Carry each item's remaining stock into opening stock and zero the day's counters."""
        items = await self._stock.list_items(ctx.team_id)
        rolled = [
            item.model_copy(
                update={
                    "opening_stock": item.remaining,
                    "added_today": 0,
                    "packed": 0,
                    "lost": 0,
                }
            )
            for item in items
        ]
        if rolled:
            rolled = await self._stock.upsert_items(rolled)

        warnings = await self._log(ctx, ALL_ITEMS, "'New Day' process initiated.")
        logger.info("stock_new_day", team_id=ctx.team_id, items=len(rolled))
        return StockChange(items=rolled, warnings=warnings)

    async def reset(self, ctx: SessionContext, confirmed: bool = False) -> None:
        """Delete all stock items, activity, suppliers and credit transactions."""
        if not confirmed:
            raise ConfirmationRequiredError(
                "This permanently deletes all inventory items, history, suppliers and "
                "transactions. Your team will remain.",
                reason="reset_stock",
                pending={},
            )
        await self._stock.delete_all(ctx.team_id)
        await self._activity.delete_all(ctx.team_id)
        await self._suppliers.delete_all(ctx.team_id)
        logger.warning("stock_data_reset", team_id=ctx.team_id, user_id=ctx.user_id)

    # Helpers

    async def _record_credit(
        self,
        ctx: SessionContext,
        supplier_name: str,
        item_name: str,
        quantity: float,
        price: float,
    ) -> CreditTransaction:
        wanted = supplier_name.lower()
        supplier = next(
            (s for s in await self._suppliers.list_suppliers(ctx.team_id) if s.name.lower() == wanted),
            None,
        )
        if supplier is None:
            supplier = await self._suppliers.create_supplier(
                Supplier(team_id=ctx.team_id, name=supplier_name, balance=0)
            )
            logger.info("supplier_created", team_id=ctx.team_id, supplier=supplier_name)

        total_value = quantity * price
        transaction = await self._suppliers.add_transaction(
            CreditTransaction(
                team_id=ctx.team_id,
                supplier_id=supplier.id or "",
                stock_item_name=item_name,
                quantity=quantity,
                total_value=total_value,
            )
        )
        await self._suppliers.set_balance(
            ctx.team_id, supplier.id or "", supplier.balance + total_value
        )
        return transaction

    async def _require_item(self, ctx: SessionContext, item_id: str) -> StockItem:
        item = await self._stock.get_item(ctx.team_id, item_id)
        if item is None:
            raise StockItemNotFoundError(item_id)
        return item

    async def _log(self, ctx: SessionContext, item_name: str, description: str) -> list[str]:
        try:
            await self._activity.add_entry(
                ActivityLogEntry(
                    team_id=ctx.team_id,
                    user_id=ctx.user_id,
                    item_name=item_name,
                    change_description=description,
                )
            )
        except StorageError as e:
            logger.error(
                "audit_write_failed",
                team_id=ctx.team_id,
                item=item_name,
                description=description,
                error=e.message,
            )
            return [f"The change was saved but its activity entry was not: {e.message}"]
        return []
