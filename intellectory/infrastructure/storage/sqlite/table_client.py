"""
Table client over the local SQLite pool.

Each call is its own transaction. Table and column names are checked as
plain identifiers; values are always bound as parameters.
"""

from typing import Any

import aiosqlite

from intellectory.config import get_logger
from intellectory.core.exceptions import DatabaseError
from intellectory.core.interfaces.table_client import ITableClient, Row, check_identifier
from intellectory.infrastructure.storage.sqlite.connection import (
    close_pool,
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)


def _as_list(rows: Row | list[Row]) -> list[Row]:
    return [rows] if isinstance(rows, dict) else list(rows)


def _where(filters: dict[str, Any] | None) -> tuple[str, list[Any]]:
    if not filters:
        return "", []
    clauses = []
    params: list[Any] = []
    for column, value in filters.items():
        check_identifier(column)
        if value is None:
            clauses.append(f"{column} IS NULL")
        else:
            clauses.append(f"{column} = ?")
            params.append(value)
    return " WHERE " + " AND ".join(clauses), params


class SQLiteTableClient(ITableClient):
    """ITableClient backed by aiosqlite."""

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        check_identifier(table)
        where, params = _where(filters)
        sql = f"SELECT * FROM {table}{where}"
        if order_by:
            sql += f" ORDER BY {check_identifier(order_by)} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        try:
            async with get_connection() as conn:
                cursor = await conn.execute(sql, params)
                return [dict(row) for row in await cursor.fetchall()]
        except aiosqlite.Error as e:
            raise DatabaseError(f"select {table}", str(e)) from e

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        check_identifier(table)
        inserted: list[Row] = []
        try:
            async with get_transaction() as conn:
                for row in _as_list(rows):
                    columns = [check_identifier(c) for c in row]
                    placeholders = ", ".join("?" for _ in columns)
                    cursor = await conn.execute(
                        f"INSERT INTO {table} ({', '.join(columns)}) "
                        f"VALUES ({placeholders}) RETURNING *",
                        list(row.values()),
                    )
                    inserted.extend(dict(r) for r in await cursor.fetchall())
        except aiosqlite.Error as e:
            raise DatabaseError(f"insert {table}", str(e)) from e
        return inserted

    async def update(self, table: str, values: Row, filters: dict[str, Any]) -> list[Row]:
        check_identifier(table)
        if not filters:
            raise ValueError("update requires at least one filter")
        assignments = ", ".join(f"{check_identifier(c)} = ?" for c in values)
        where, params = _where(filters)

        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    f"UPDATE {table} SET {assignments}{where} RETURNING *",
                    [*values.values(), *params],
                )
                return [dict(row) for row in await cursor.fetchall()]
        except aiosqlite.Error as e:
            raise DatabaseError(f"update {table}", str(e)) from e

    async def upsert(
        self,
        table: str,
        rows: Row | list[Row],
        on_conflict: list[str],
    ) -> list[Row]:
        check_identifier(table)
        conflict = [check_identifier(c) for c in on_conflict]
        written: list[Row] = []

        try:
            async with get_transaction() as conn:
                for row in _as_list(rows):
                    columns = [check_identifier(c) for c in row]
                    placeholders = ", ".join("?" for _ in columns)
                    merge = [c for c in columns if c not in conflict and c != "id"]
                    action = (
                        "DO UPDATE SET " + ", ".join(f"{c} = excluded.{c}" for c in merge)
                        if merge
                        else "DO NOTHING"
                    )
                    cursor = await conn.execute(
                        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
                        f"ON CONFLICT ({', '.join(conflict)}) {action} RETURNING *",
                        list(row.values()),
                    )
                    written.extend(dict(r) for r in await cursor.fetchall())
        except aiosqlite.Error as e:
            raise DatabaseError(f"upsert {table}", str(e)) from e
        return written

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        check_identifier(table)
        if not filters:
            raise ValueError("delete requires at least one filter")
        where, params = _where(filters)

        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(f"DELETE FROM {table}{where}", params)
                return cursor.rowcount
        except aiosqlite.Error as e:
            raise DatabaseError(f"delete {table}", str(e)) from e

    async def ping(self) -> None:
        try:
            async with get_connection() as conn:
                await conn.execute("SELECT 1")
        except aiosqlite.Error as e:
            raise DatabaseError("ping", str(e)) from e

    async def close(self) -> None:
        await close_pool()
