"""
Table client for a hosted PostgREST-style data API.

Rows live at `{base_url}/rest/v1/{table}`; filters are `column=eq.value`,
ordering `order=column.desc`, and writes ask for the written rows back
with `Prefer: return=representation`.
"""

from typing import Any

import httpx

from intellectory.config import get_logger
from intellectory.core.exceptions import DatabaseError
from intellectory.core.interfaces.table_client import ITableClient, Row, check_identifier

logger = get_logger(__name__)


def _filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _filter_params(filters: dict[str, Any] | None) -> dict[str, str]:
    return {check_identifier(column): _filter_value(value) for column, value in (filters or {}).items()}


class RestTableClient(ITableClient):
    """ITableClient speaking the PostgREST dialect over httpx."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _request(
        self,
        operation: str,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> list[Row]:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await self._client.request(
                method,
                f"/{check_identifier(table)}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("rest_request_failed", operation=operation, table=table, error=str(e))
            raise DatabaseError(f"{operation} {table}", str(e)) from e

        if response.status_code >= 400:
            detail = response.text[:200]
            logger.warning(
                "rest_request_rejected",
                operation=operation,
                table=table,
                status=response.status_code,
                detail=detail,
            )
            raise DatabaseError(
                f"{operation} {table}",
                f"{response.status_code} {response.reason_phrase}: {detail}",
            )

        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        params = {"select": "*", **_filter_params(filters)}
        if order_by:
            params["order"] = f"{check_identifier(order_by)}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        return await self._request("select", "GET", table, params=params)

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        return await self._request(
            "insert", "POST", table, json=rows, prefer="return=representation"
        )

    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        if not filters:
            raise ValueError("update requires at least one filter")
        return await self._request(
            "update",
            "PATCH",
            table,
            params=_filter_params(filters),
            json=values,
            prefer="return=representation",
        )

    async def upsert(
        self,
        table: str,
        rows: Row | list[Row],
        on_conflict: list[str],
    ) -> list[Row]:
        return await self._request(
            "upsert",
            "POST",
            table,
            params={"on_conflict": ",".join(check_identifier(c) for c in on_conflict)},
            json=rows,
            prefer="resolution=merge-duplicates,return=representation",
        )

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        if not filters:
            raise ValueError("delete requires at least one filter")
        deleted = await self._request(
            "delete",
            "DELETE",
            table,
            params=_filter_params(filters),
            prefer="return=representation",
        )
        return len(deleted)

    async def ping(self) -> None:
        await self._request("ping", "GET", "teams", params={"select": "id", "limit": "1"})

    async def close(self) -> None:
        await self._client.aclose()
