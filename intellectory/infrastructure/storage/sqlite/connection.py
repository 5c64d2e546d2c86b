"""
Async SQLite connection pool on aiosqlite.

The local backend of the table client. Connections are opened on demand
up to `pool_size`, each with WAL journaling, enforced foreign keys (bin
balances cascade when their party is deleted) and a busy timeout so that
concurrent team writes wait instead of failing with "database is locked".
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from intellectory.config import get_logger, get_settings

logger = get_logger(__name__)

PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Bounded pool of aiosqlite connections to one database file."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: list[aiosqlite.Connection] = []
        self._opened = 0
        self._available = asyncio.Condition()
        self._closed = False

    @property
    def opened(self) -> int:
        """Connections opened so far (idle or in use)."""
        return self._opened

    async def _open(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(self.db_path)
        for pragma in PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        conn.row_factory = aiosqlite.Row
        logger.debug("sqlite_connection_opened", db_path=str(self.db_path), opened=self._opened + 1)
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        async with self._available:
            while True:
                if self._closed:
                    raise RuntimeError("connection pool is closed")
                if self._idle:
                    return self._idle.pop()
                if self._opened < self.pool_size:
                    self._opened += 1
                    break
                await self._available.wait()
        try:
            return await self._open()
        except Exception:
            async with self._available:
                self._opened -= 1
                self._available.notify()
            raise

    async def _checkin(self, conn: aiosqlite.Connection) -> None:
        async with self._available:
            if self._closed:
                await conn.close()
                return
            self._idle.append(conn)
            self._available.notify()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = await self._checkout()
        try:
            yield conn
        finally:
            await self._checkin(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Acquire a connection; commit on success, roll back on error."""
        async with self.acquire() as conn:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def close(self) -> None:
        """Close idle connections; busy ones are closed when returned."""
        async with self._available:
            self._closed = True
            idle, self._idle = self._idle, []
            self._available.notify_all()
        for conn in idle:
            await conn.close()
        logger.info("connection_pool_closed", db_path=str(self.db_path), opened=self._opened)


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the process-wide pool from storage settings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        logger.info("connection_pool_created", db_path=str(storage.db_path), size=storage.pool_size)
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn
