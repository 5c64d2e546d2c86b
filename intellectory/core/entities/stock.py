"""Stock domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class StockField(str, Enum):
    """Directly editable numeric fields of a stock item."""

    OPENING_STOCK = "opening_stock"
    ADDED_TODAY = "added_today"
    PACKED = "packed"
    LOST = "lost"
    ALERT_LEVEL = "alert_level"
    PRICE = "price"

    @property
    def label(self) -> str:
        """Human label used in activity log entries."""
        return _FIELD_LABELS[self]


_FIELD_LABELS: dict[StockField, str] = {
    StockField.OPENING_STOCK: "Opening Stock",
    StockField.ADDED_TODAY: "Added Today",
    StockField.PACKED: "Packed",
    StockField.LOST: "Lost",
    StockField.ALERT_LEVEL: "Alert Level",
    StockField.PRICE: "Price",
}


class StockItem(BaseModel):
    """A stocked consumable with its running daily counters."""

    id: str | None = None
    team_id: str
    name: str
    category: str = ""
    opening_stock: float = 0.0
    added_today: float = 0.0
    packed: float = 0.0
    lost: float = 0.0
    alert_level: float = 0.0
    price: float = 0.0  # unit price
    color: str = "#3B82F6"

    @property
    def used(self) -> float:
        return self.packed + self.lost

    @property
    def remaining(self) -> float:
        """Opening plus additions minus usage. Not clamped: may go negative."""
        return self.opening_stock + self.added_today - self.used

    @property
    def stock_value(self) -> float:
        return self.remaining * self.price

    @property
    def is_low_stock(self) -> bool:
        return self.remaining <= self.alert_level


class ActivityLogEntry(BaseModel):
    """Immutable audit record for a stock change."""

    id: str | None = None
    team_id: str
    user_id: str | None = None
    item_name: str
    change_description: str
    timestamp: datetime = Field(default_factory=datetime.now)


class Supplier(BaseModel):
    """Supplier with a running credit balance (never decremented here)."""

    id: str | None = None
    team_id: str
    name: str
    balance: float = 0.0


class CreditTransaction(BaseModel):
    """A stock addition bought on account."""

    id: str | None = None
    team_id: str
    supplier_id: str
    stock_item_name: str
    quantity: float
    total_value: float
    created_at: datetime = Field(default_factory=datetime.now)


class StockSummary(BaseModel):
    """Aggregate figures across all stock items of a team."""

    total_remaining: float = 0.0
    total_stock_value: float = 0.0
    low_stock_count: int = 0
    total_items: int = 0

    @classmethod
    def from_items(cls, items: list[StockItem]) -> "StockSummary":
        return cls(
            total_remaining=sum(item.remaining for item in items),
            total_stock_value=sum(item.stock_value for item in items),
            low_stock_count=sum(1 for item in items if item.is_low_stock),
            total_items=len(items),
        )
