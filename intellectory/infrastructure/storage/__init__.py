"""Storage infrastructure implementations."""

from intellectory.infrastructure.storage.factory import (
    close_table_client,
    create_table_client,
    get_table_client,
)
from intellectory.infrastructure.storage.retry import RetryingTableClient
from intellectory.infrastructure.storage.unavailable import UnavailableTableClient

__all__ = [
    "get_table_client",
    "create_table_client",
    "close_table_client",
    "RetryingTableClient",
    "UnavailableTableClient",
]
