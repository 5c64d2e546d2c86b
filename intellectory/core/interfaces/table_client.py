"""
Abstract row-level table API.

The hosted data store is reached only through these operations: equality
filters, ordering and a row cap. No joins, no transactions spanning calls.
"""

import re
from abc import ABC, abstractmethod
from typing import Any

Row = dict[str, Any]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    """Reject anything that is not a plain table or column name."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return name


class ITableClient(ABC):
    """
    Interface for row-level table access.

    Implementations: SQLiteTableClient, RestTableClient, UnavailableTableClient.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        """Return rows matching all equality filters."""
        pass

    @abstractmethod
    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert one or more rows and return them with defaults filled."""
        pass

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Row,
        filters: dict[str, Any],
    ) -> list[Row]:
        """Update matching rows and return them."""
        pass

    @abstractmethod
    async def upsert(
        self,
        table: str,
        rows: Row | list[Row],
        on_conflict: list[str],
    ) -> list[Row]:
        """Insert rows, merging into existing ones that collide on `on_conflict`."""
        pass

    @abstractmethod
    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        """Delete matching rows and return how many were removed."""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the store cannot be reached."""
        pass

    async def close(self) -> None:
        """Release connections held by the client."""
        return None
