"""Local SQLite backend."""

from intellectory.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from intellectory.infrastructure.storage.sqlite.table_client import SQLiteTableClient

__all__ = [
    "ConnectionPool",
    "SQLiteTableClient",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
