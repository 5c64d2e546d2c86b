"""Table client used when no data store is configured."""

from typing import Any

from intellectory.core.exceptions import StoreUnavailableError
from intellectory.core.interfaces.table_client import ITableClient, Row


class UnavailableTableClient(ITableClient):
    """Every operation raises StoreUnavailableError with the configured reason."""

    def __init__(self, reason: str):
        self.reason = reason

    def _fail(self) -> StoreUnavailableError:
        return StoreUnavailableError(self.reason)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        raise self._fail()

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        raise self._fail()

    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        raise self._fail()

    async def upsert(self, table: str, rows: Row | list[Row], on_conflict: list[str]) -> list[Row]:
        raise self._fail()

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        raise self._fail()

    async def ping(self) -> None:
        raise self._fail()
