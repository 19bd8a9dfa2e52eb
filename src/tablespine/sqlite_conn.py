"""SQLite connection adapter.

Wraps a raw :class:`sqlite3.Connection` to satisfy the
:class:`~tablespine.protocols.Connection` protocol, with ``sqlite3.Row``
rows so results come back keyed by column name.

Usage::

    from tablespine.sqlite_conn import SqliteConnection

    conn = SqliteConnection(":memory:")
    conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)")
    accessor = TableAccessor(conn, "items", "id", ["id", "name"])
    accessor.create({"name": "widget"})
    conn.close()

``INSERT/UPDATE/DELETE ... RETURNING`` needs SQLite 3.35 or newer.
"""

from __future__ import annotations

import sqlite3
from typing import Any


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Keeps a single cursor so that ``execute`` / ``fetchone`` / ``fetchall``
    operate on the same result set.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        row_factory: Any = sqlite3.Row,
        foreign_keys: bool = True,
    ) -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = row_factory
        if foreign_keys:
            self._conn.execute("PRAGMA foreign_keys=ON")
        self._cursor = self._conn.cursor()
        self.path = path

    # -- Connection protocol -----------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        self._cursor.execute(sql, params)
        return self._cursor

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        self._cursor.executemany(sql, params)
        return self._cursor

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        return self._cursor.fetchall()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    @property
    def description(self) -> Any:
        return self._cursor.description

    @property
    def raw(self) -> sqlite3.Connection:
        """Access the underlying ``sqlite3.Connection`` (e.g. for pragmas)."""
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteConnection({self.path!r})"


__all__ = ["SqliteConnection"]
