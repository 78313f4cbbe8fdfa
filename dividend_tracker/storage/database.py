"""
PostgreSQL access for the holdings store.

A ``Database`` owns one asyncpg pool and exposes the four query shapes the
repository uses. It is constructed explicitly (by ``ServiceContext`` or the
CLI) and passed down; there is no module-level pool.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from dividend_tracker.config.settings import get_settings

logger = logging.getLogger(__name__)


def affected_rows(status: str) -> int:
    """Parse the row count from an asyncpg command status like ``DELETE 1``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


class Database:
    """
    Usage:
        async with Database() as db:
            rows = await db.fetch("SELECT * FROM portfolio_holdings")
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        command_timeout: float = 30.0,
    ):
        settings = get_settings()
        self._dsn = database_url or str(settings.database_url)
        self._pool_size = (
            min_size or settings.db_pool_min_size,
            max_size or settings.db_pool_max_size,
        )
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    @property
    def connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        min_size, max_size = self._pool_size
        try:
            self._pool = await asyncpg.create_pool(
                self._dsn,
                min_size=min_size,
                max_size=max_size,
                command_timeout=self._command_timeout,
            )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Could not open holdings database pool: {e}")
            raise
        logger.info(f"Holdings database pool open ({min_size}-{max_size} connections)")

    async def close(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        logger.info("Holdings database pool closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        if self._pool is None:
            raise RuntimeError("Database is not connected; call connect() first")
        async with self._pool.acquire() as conn:
            yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return its command status, e.g. ``DELETE 1``."""
        async with self._connection() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        async with self._connection() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        async with self._connection() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self._connection() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """True when the pool is open and ``SELECT 1`` round-trips."""
        if self._pool is None:
            return False
        try:
            return await self.fetchval("SELECT 1") == 1
        except (asyncpg.PostgresError, OSError) as e:
            logger.warning(f"Holdings database health check failed: {e}")
            return False
