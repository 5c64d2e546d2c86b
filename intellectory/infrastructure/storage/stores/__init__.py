"""Aggregate stores over the table client."""

from intellectory.infrastructure.storage.stores.bin_store import TableBinStore
from intellectory.infrastructure.storage.stores.stock_store import (
    TableActivityLogStore,
    TableStockStore,
    TableSupplierStore,
)
from intellectory.infrastructure.storage.stores.team_store import TableTeamStore

__all__ = [
    "TableStockStore",
    "TableActivityLogStore",
    "TableSupplierStore",
    "TableBinStore",
    "TableTeamStore",
]
