"""
Async PostgreSQL support: pool helpers and an asyncpg connection adapter.

Architecture:
    ::

        pool = await create_pool(database_url, min_size=2)

        async with pool.acquire() as raw:
            conn = AsyncpgConnection(raw)
            users = AsyncTableAccessor(conn, "users", "username", columns,
                                       dialect=AsyncPGDialect())
            await users.find_all({"search": "smit"})

        await close_pool(pool)

``AsyncpgConnection`` runs each statement with ``fetch`` and keeps the
records for ``fetchall``.  asyncpg is in autocommit mode unless a
transaction is open, so with ``transactional=True`` the adapter opens one on
the first statement and ``commit`` / ``rollback`` close it.

Guardrails:
    - ALWAYS use context manager (async with pool.acquire())
    - Statements must use ``$1, $2, ...`` placeholders (``AsyncPGDialect``)

Tags:
    asyncpg, postgresql, async, pool, tablespine
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from tablespine.logging import get_logger

if TYPE_CHECKING:
    from asyncpg import Connection as PGConnection
    from asyncpg import Pool

logger = get_logger(__name__)


def normalize_database_url(url: str) -> str:
    """Normalize database URL for asyncpg compatibility.

    Examples:
        >>> normalize_database_url("postgresql+asyncpg://localhost/db")
        'postgresql://localhost/db'
        >>> normalize_database_url("postgresql://localhost/db?sslmode=require")
        'postgresql://localhost/db'
    """
    url = re.sub(r"^postgres(ql)?\+\w+://", "postgresql://", url)

    # asyncpg handles SSL via ssl=
    if "?sslmode=" in url or "&sslmode=" in url:
        url = re.sub(r"[?&]sslmode=[^&]*", "", url)
        url = url.rstrip("?&")

    return url


async def create_pool(
    database_url: str,
    min_size: int = 5,
    max_size: int = 20,
    command_timeout: float = 60.0,
    ssl: bool = False,
) -> Pool:
    """Create an asyncpg connection pool.

    Raises:
        ImportError: asyncpg is not installed.
        RuntimeError: If pool creation fails.
    """
    try:
        import asyncpg
    except ImportError as e:
        raise ImportError(
            "asyncpg is required for async PostgreSQL access. Install with: pip install tablespine[postgres]"
        ) from e

    database_url = normalize_database_url(database_url)
    logger.info("pool_creating", min_size=min_size, max_size=max_size)

    pool = await asyncpg.create_pool(
        database_url,
        min_size=min_size,
        max_size=max_size,
        command_timeout=command_timeout,
        ssl=ssl,
    )
    if pool is None:
        raise RuntimeError("Failed to create connection pool")
    return pool


async def close_pool(pool: Pool) -> None:
    """Close the pool, waiting for connections to be released."""
    logger.info("pool_closing")
    await pool.close()


class AsyncpgConnection:
    """Adapter: asyncpg ``Connection`` → ``AsyncConnection`` protocol."""

    def __init__(self, conn: PGConnection, *, transactional: bool = False) -> None:
        self._conn = conn
        self._transactional = transactional
        self._transaction: Any = None
        self._rows: list[Any] = []

    async def _begin(self) -> None:
        if self._transactional and self._transaction is None:
            self._transaction = self._conn.transaction()
            await self._transaction.start()

    async def execute(self, sql: str, params: tuple = ()) -> AsyncpgConnection:
        await self._begin()
        self._rows = list(await self._conn.fetch(sql, *params))
        return self

    async def executemany(self, sql: str, params: list[tuple]) -> None:
        await self._begin()
        await self._conn.executemany(sql, params)
        self._rows = []

    async def fetchone(self) -> Any:
        return self._rows[0] if self._rows else None

    async def fetchall(self) -> list:
        return list(self._rows)

    async def commit(self) -> None:
        if self._transaction is not None:
            transaction, self._transaction = self._transaction, None
            await transaction.commit()

    async def rollback(self) -> None:
        if self._transaction is not None:
            transaction, self._transaction = self._transaction, None
            await transaction.rollback()

    @property
    def raw(self) -> PGConnection:
        return self._conn

    def __repr__(self) -> str:
        return f"AsyncpgConnection(transactional={self._transactional})"


__all__ = [
    "normalize_database_url",
    "create_pool",
    "close_pool",
    "AsyncpgConnection",
]
