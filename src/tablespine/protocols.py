"""
Storage protocols for tablespine.

The accessor depends on the shape of a connection, never on a driver.
Any object with these methods works: ``sqlite3.Connection`` natively, or
the adapters shipped in :mod:`tablespine.sqlite_conn`,
:mod:`tablespine.session` and :mod:`tablespine.asyncpg_conn`.

Architecture:
    ::

        protocols.py
        ├── Connection          sync DB protocol (sqlite3, SQLAlchemy bridge)
        └── AsyncConnection     async DB protocol (asyncpg adapter)

Guardrails:
    ❌ DON'T: Add implementation logic to protocol classes
    ✅ DO: Keep protocols pure contracts; implementations go in adapters

Tags:
    protocol, connection, async, database, tablespine
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """
    Minimal synchronous connection interface.

    ``execute`` returns something with ``fetchall()`` (a cursor, or the
    connection itself) and, ideally, a DB-API ``description`` so rows can be
    turned into dicts.

    Examples:
        >>> conn.execute("SELECT id, name FROM users WHERE id = ?", (1,))
        >>> row = conn.fetchone()
    """

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with optional parameters."""
        ...

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        """Execute SQL statement for multiple parameter sets."""
        ...

    def fetchone(self) -> Any:
        """Fetch one row from last query."""
        ...

    def fetchall(self) -> list:
        """Fetch all rows from last query."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


@runtime_checkable
class AsyncConnection(Protocol):
    """
    Async twin of :class:`Connection` for async-native drivers.

    Examples:
        >>> async def fetch_users(conn: AsyncConnection):
        ...     await conn.execute("SELECT * FROM users WHERE active = $1", (True,))
        ...     return await conn.fetchall()
    """

    async def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with optional parameters."""
        ...

    async def executemany(self, sql: str, params: list[tuple]) -> Any:
        """Execute SQL statement for multiple parameter sets."""
        ...

    async def fetchone(self) -> Any:
        """Fetch one row from last query."""
        ...

    async def fetchall(self) -> list:
        """Fetch all rows from last query."""
        ...

    async def commit(self) -> None:
        """Commit current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback current transaction."""
        ...


__all__ = ["Connection", "AsyncConnection"]
