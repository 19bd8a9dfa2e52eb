"""Base repositories with dialect-aware statement execution.

Provides :class:`BaseRepository` and :class:`AsyncBaseRepository`, which pair
a connection with a :class:`~tablespine.dialect.Dialect`.  They are the only
place that talks to the storage collaborator: every failure raised by the
driver is re-raised as :class:`~tablespine.errors.StorageFaultError` with
the driver's message, and the driver exception chained as its cause.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   conn: Connection        ← protocol from tablespine.protocols     │
    │   dialect: Dialect        ← from tablespine.dialect                │
    │                                                                    │
    │   execute(sql, params)     → cursor                                │
    │   query(sql, params)       → list[dict]                            │
    │   query_one(sql, params)   → dict | None                           │
    │   run(statement)           → list[dict]                            │
    │   commit() / rollback()                                            │
    └────────────────────────────────────────────────────────────────────┘

Tags:
    repository, database, abstraction, portability
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tablespine.dialect import Dialect, SQLiteDialect
from tablespine.errors import StorageFaultError, TableError
from tablespine.logging import get_logger
from tablespine.protocols import AsyncConnection, Connection
from tablespine.statement import Statement

logger = get_logger(__name__)


def rows_as_dicts(rows: Sequence[Any], description: Any = None) -> list[dict[str, Any]]:
    """Turn driver rows into dicts.

    Column names come from a DB-API ``description`` when there is one;
    otherwise rows must be mappings themselves (``sqlite3.Row``, asyncpg
    ``Record``).
    """
    if not rows:
        return []

    if description:
        columns = [desc[0] for desc in description]
        return [dict(zip(columns, row, strict=False)) for row in rows]

    if hasattr(rows[0], "keys"):
        return [{k: row[k] for k in row.keys()} for row in rows]

    # Last resort: integer-keyed dicts
    return [{i: v for i, v in enumerate(row)} for row in rows]


def _storage_fault(exc: Exception, sql: str | None = None) -> StorageFaultError:
    logger.warning("storage_fault", error=str(exc), error_type=type(exc).__name__, sql=sql)
    fault = StorageFaultError(str(exc), cause=exc)
    if sql is not None:
        fault.with_context(sql=sql)
    return fault


class BaseRepository:
    """Dialect-aware base class for synchronous data access.

    Parameters:
        conn: Any object satisfying the :class:`Connection` protocol.
        dialect: SQL dialect to use.  Defaults to :class:`SQLiteDialect`.
    """

    def __init__(self, conn: Connection, dialect: Dialect | None = None) -> None:
        self.conn = conn
        self.dialect: Dialect = dialect or SQLiteDialect()

    # -- Query helpers -----------------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a statement and return the raw cursor/result."""
        try:
            return self.conn.execute(sql, params)
        except TableError:
            raise
        except Exception as e:
            raise _storage_fault(e, sql) from e

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a statement and return its rows as dicts."""
        cursor = self.execute(sql, params)
        try:
            rows = cursor.fetchall()
        except Exception as e:
            raise _storage_fault(e, sql) from e
        return rows_as_dicts(rows, getattr(cursor, "description", None))

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        """Execute a statement and return the first row as a dict (or None)."""
        results = self.query(sql, params)
        return results[0] if results else None

    def run(self, statement: Statement) -> list[dict[str, Any]]:
        """Execute a rendered :class:`Statement`."""
        return self.query(statement.sql, statement.params)

    # -- Transactions ------------------------------------------------------

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self.conn.commit()
        except Exception as e:
            raise _storage_fault(e) from e

    def rollback(self) -> None:
        """Roll back the current transaction."""
        try:
            self.conn.rollback()
        except Exception as e:
            raise _storage_fault(e) from e


class AsyncBaseRepository:
    """Async twin of :class:`BaseRepository` over an :class:`AsyncConnection`."""

    def __init__(self, conn: AsyncConnection, dialect: Dialect | None = None) -> None:
        self.conn = conn
        self.dialect: Dialect = dialect or SQLiteDialect()

    async def execute(self, sql: str, params: tuple = ()) -> Any:
        try:
            return await self.conn.execute(sql, params)
        except TableError:
            raise
        except Exception as e:
            raise _storage_fault(e, sql) from e

    async def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        cursor = await self.execute(sql, params)
        try:
            rows = await self.conn.fetchall()
        except Exception as e:
            raise _storage_fault(e, sql) from e
        return rows_as_dicts(rows, getattr(cursor, "description", None))

    async def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        results = await self.query(sql, params)
        return results[0] if results else None

    async def run(self, statement: Statement) -> list[dict[str, Any]]:
        return await self.query(statement.sql, statement.params)

    async def commit(self) -> None:
        try:
            await self.conn.commit()
        except Exception as e:
            raise _storage_fault(e) from e

    async def rollback(self) -> None:
        try:
            await self.conn.rollback()
        except Exception as e:
            raise _storage_fault(e) from e


__all__ = [
    "BaseRepository",
    "AsyncBaseRepository",
    "rows_as_dicts",
]
