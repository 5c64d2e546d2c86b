"""
Retrying decorator for table clients.

Transient store failures are retried with exponential backoff. Failures
that cannot succeed on retry (invalid request, auth, missing table, store
not configured) are raised at once.
"""

import re
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from intellectory.config import get_logger
from intellectory.core.exceptions import DatabaseError, StoreUnavailableError
from intellectory.core.interfaces.table_client import ITableClient, Row

logger = get_logger(__name__)

_PERMANENT = re.compile(r"invalid|unauthorized|forbidden|not found|constraint", re.IGNORECASE)


def is_transient(error: BaseException) -> bool:
    if isinstance(error, StoreUnavailableError):
        return False
    if isinstance(error, DatabaseError):
        return not _PERMANENT.search(error.message)
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "store_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


class RetryingTableClient(ITableClient):
    """Wraps another ITableClient and retries transient failures."""

    def __init__(self, inner: ITableClient, attempts: int = 3, base_delay: float = 0.3):
        self.inner = inner
        self.attempts = attempts
        self.base_delay = base_delay

    async def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.base_delay, min=self.base_delay, max=self.base_delay * 8),
            retry=retry_if_exception(is_transient),
            before_sleep=_log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await getattr(self.inner, method)(*args, **kwargs)

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        return await self._call(
            "select", table, filters=filters, order_by=order_by, descending=descending, limit=limit
        )

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        return await self._call("insert", table, rows)

    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        return await self._call("update", table, values, filters)

    async def upsert(self, table: str, rows: Row | list[Row], on_conflict: list[str]) -> list[Row]:
        return await self._call("upsert", table, rows, on_conflict)

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        return await self._call("delete", table, filters)

    async def ping(self) -> None:
        await self.inner.ping()

    async def close(self) -> None:
        await self.inner.close()
