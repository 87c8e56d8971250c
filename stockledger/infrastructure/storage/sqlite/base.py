"""Shared connection handling and value conversion for the SQLite stores."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from decimal import Decimal

import aiosqlite

from stockledger.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool


class SQLiteStore:
    """
    Base for stores that can join a caller's transaction.

    Every store method accepts an optional ``conn``. When given, statements
    run on it and the caller owns commit/rollback; otherwise the store
    borrows a pooled connection (reads) or opens its own transaction (writes).
    """

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        pool = await self._get_pool()
        async with pool.transaction() as conn:
            yield conn

    @asynccontextmanager
    async def _reading(
        self, conn: aiosqlite.Connection | None = None
    ) -> AsyncIterator[aiosqlite.Connection]:
        if conn is not None:
            yield conn
            return
        pool = await self._get_pool()
        async with pool.acquire() as own:
            yield own

    @asynccontextmanager
    async def _writing(
        self, conn: aiosqlite.Connection | None = None
    ) -> AsyncIterator[aiosqlite.Connection]:
        if conn is not None:
            yield conn
            return
        async with self.transaction() as own:
            yield own

    @staticmethod
    async def _count(conn: aiosqlite.Connection, sql: str, params: list) -> int:
        cursor = await conn.execute(sql, params)
        row = await cursor.fetchone()
        return int(row[0]) if row else 0


def to_db_decimal(value: Decimal) -> str:
    return str(Decimal(value))


def from_db_decimal(value: str | int | float | None) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def to_db_datetime(value: datetime | None) -> str | None:
    """Aware datetimes are stored in UTC; naive ones are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def from_db_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_db_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


def from_db_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None
