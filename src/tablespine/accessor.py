"""Table accessors: CRUD over one table without hand-written SQL.

:class:`TableAccessor` (sync) and :class:`AsyncTableAccessor` (async) expose
the same five operations on top of a :class:`~tablespine.model.TableModel`:

==========================  =============================================
``get(pk)``                 row dict, or ``None`` when absent
``find_all(query)``         list of row dicts (range bounds + search)
``create(data)``            inserted row
``update(pk, data)``        updated row; ``NotFoundError`` if no row
``remove(pk)``              ``None``; ``NotFoundError`` if no row
==========================  =============================================

Every operation issues exactly one statement.  With ``autocommit`` on (the
default) mutations are committed right away and rolled back when they
fail; with it off, the caller owns the transaction.

Usage::

    from tablespine import TableAccessor, create_connection

    conn, info = create_connection("app.db")
    users = TableAccessor(
        conn, "users", "username",
        ["username", "first_name", "last_name", "email", "status"],
        dialect=info.dialect,
    )

    users.create({"username": "ann", "first_name": "Ann", "_csrf": "x"})
    users.find_all({"search": "an"})
    users.update("ann", {"status": "active"})
    users.remove("ann")

Tags:
    repository, crud, table-accessor, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable, Iterator, Mapping
from contextlib import asynccontextmanager, contextmanager
from typing import Any

from tablespine.connection import connect_from_settings
from tablespine.dialect import Dialect
from tablespine.errors import NotFoundError, StorageFaultError, TableError
from tablespine.filters import FilterSchema
from tablespine.logging import get_logger
from tablespine.model import TableModel
from tablespine.protocols import AsyncConnection, Connection
from tablespine.repository import AsyncBaseRepository, BaseRepository
from tablespine.settings import TableSpineSettings, get_settings

logger = get_logger(__name__)


def _context(model: TableModel, operation: str, primary_key: Any) -> dict[str, Any]:
    ctx: dict[str, Any] = {"table": model.table_name, "operation": operation}
    if primary_key is not None:
        ctx["primary_key"] = primary_key
    return ctx


class TableAccessor(BaseRepository):
    """Synchronous CRUD accessor for one table.

    Parameters:
        conn: Connection satisfying :class:`~tablespine.protocols.Connection`.
        table_name: Table identifier (trusted configuration).
        primary_key: Primary-key column.
        columns: Ordered column list; copied at construction.
        dialect: SQL dialect.  Defaults to SQLite.
        filters: Filter schema for ``find_all``.
        search_column: Column matched by ``search`` (default: second column).
        autocommit: Commit after each successful mutation.
    """

    def __init__(
        self,
        conn: Connection,
        table_name: str,
        primary_key: str,
        columns: Iterable[str],
        *,
        dialect: Dialect | None = None,
        filters: FilterSchema | None = None,
        search_column: str | None = None,
        autocommit: bool = True,
    ) -> None:
        super().__init__(conn, dialect)
        self.model = TableModel(
            table_name,
            primary_key,
            columns,
            dialect=self.dialect,
            filters=filters,
            search_column=search_column,
        )
        self.autocommit = autocommit

    @classmethod
    def from_model(
        cls, conn: Connection, model: TableModel, *, autocommit: bool = True
    ) -> TableAccessor:
        """Bind an existing :class:`TableModel` to a connection."""
        return cls(
            conn,
            model.table_name,
            model.primary_key,
            model.columns,
            dialect=model.dialect,
            filters=model.filters,
            search_column=model.search_column,
            autocommit=autocommit,
        )

    @classmethod
    def from_settings(
        cls,
        table_name: str,
        primary_key: str,
        columns: Iterable[str],
        *,
        settings: TableSpineSettings | None = None,
        filters: FilterSchema | None = None,
        search_column: str | None = None,
    ) -> TableAccessor:
        """Open the configured database and bind an accessor to it.

        Connection URL, dialect and ``autocommit`` all come from
        :class:`~tablespine.settings.TableSpineSettings` (``get_settings()``
        when ``settings`` is omitted).  The connection is ``accessor.conn``.
        """
        if settings is None:
            settings = get_settings()
        conn, info = connect_from_settings(settings)
        return cls(
            conn,
            table_name,
            primary_key,
            columns,
            dialect=info.dialect,
            filters=filters,
            search_column=search_column,
            autocommit=settings.autocommit,
        )

    @property
    def table_name(self) -> str:
        return self.model.table_name

    @property
    def primary_key(self) -> str:
        return self.model.primary_key

    @property
    def columns(self) -> tuple[str, ...]:
        return self.model.columns

    @contextmanager
    def _operation(
        self, name: str, primary_key: Any = None, *, mutation: bool = False
    ) -> Iterator[None]:
        try:
            yield
            if mutation and self.autocommit:
                self.commit()
        except TableError as e:
            if isinstance(e, StorageFaultError):
                e.with_context(**_context(self.model, name, primary_key))
            else:
                e.with_context(table=self.model.table_name, operation=name)
            # a mutation that raised still ends its own transaction
            if mutation and self.autocommit:
                self._rollback_quietly()
            raise

    def _rollback_quietly(self) -> None:
        # the original fault is what the caller needs to see
        try:
            self.conn.rollback()
        except Exception as e:
            logger.warning("rollback_failed", table=self.model.table_name, error=str(e))

    # -- CRUD ----------------------------------------------------------------

    def get(self, primary_key: Any) -> dict[str, Any] | None:
        """Row with the given primary key, or ``None``."""
        with self._operation("get", primary_key):
            rows = self.run(self.model.select_statement(primary_key))
        return rows[0] if rows else None

    def find_all(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """All rows matching the query's range bounds and search term.

        Raises:
            InvalidRangeError: An upper bound is below its lower bound; raised
                before any statement is issued.
        """
        with self._operation("find_all"):
            return self.run(self.model.find_statement(query))

    def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row; ``_``-prefixed keys are dropped (``data`` is not modified).

        Raises:
            InvalidPayloadError: Empty payload or undeclared columns.
            StorageFaultError: Constraint violation or any other store failure.
        """
        with self._operation("create", mutation=True):
            rows = self.run(self.model.insert_statement(data))
        logger.debug("row_created", table=self.model.table_name)
        return rows[0]

    def update(self, primary_key: Any, data: Mapping[str, Any]) -> dict[str, Any]:
        """Partial update of the columns present in ``data``.

        Raises:
            NotFoundError: No row has this primary key.
        """
        with self._operation("update", primary_key, mutation=True):
            rows = self.run(self.model.update_statement(primary_key, data))
            if not rows:
                raise NotFoundError(self.model.table_name, self.model.primary_key, primary_key)
        logger.debug("row_updated", table=self.model.table_name, primary_key=primary_key)
        return rows[0]

    def remove(self, primary_key: Any) -> None:
        """Delete one row.

        Raises:
            NotFoundError: No row has this primary key.
        """
        with self._operation("remove", primary_key, mutation=True):
            rows = self.run(self.model.delete_statement(primary_key))
            if not rows:
                raise NotFoundError(self.model.table_name, self.model.primary_key, primary_key)
        logger.debug("row_removed", table=self.model.table_name, primary_key=primary_key)

    def __repr__(self) -> str:
        return f"TableAccessor({self.model!r})"


class AsyncTableAccessor(AsyncBaseRepository):
    """Async CRUD accessor; same semantics as :class:`TableAccessor`."""

    def __init__(
        self,
        conn: AsyncConnection,
        table_name: str,
        primary_key: str,
        columns: Iterable[str],
        *,
        dialect: Dialect | None = None,
        filters: FilterSchema | None = None,
        search_column: str | None = None,
        autocommit: bool = True,
    ) -> None:
        super().__init__(conn, dialect)
        self.model = TableModel(
            table_name,
            primary_key,
            columns,
            dialect=self.dialect,
            filters=filters,
            search_column=search_column,
        )
        self.autocommit = autocommit

    @classmethod
    def from_model(
        cls, conn: AsyncConnection, model: TableModel, *, autocommit: bool = True
    ) -> AsyncTableAccessor:
        return cls(
            conn,
            model.table_name,
            model.primary_key,
            model.columns,
            dialect=model.dialect,
            filters=model.filters,
            search_column=model.search_column,
            autocommit=autocommit,
        )

    @asynccontextmanager
    async def _operation(
        self, name: str, primary_key: Any = None, *, mutation: bool = False
    ) -> AsyncIterator[None]:
        try:
            yield
            if mutation and self.autocommit:
                await self.commit()
        except TableError as e:
            if isinstance(e, StorageFaultError):
                e.with_context(**_context(self.model, name, primary_key))
            else:
                e.with_context(table=self.model.table_name, operation=name)
            # a mutation that raised still ends its own transaction
            if mutation and self.autocommit:
                await self._rollback_quietly()
            raise

    async def _rollback_quietly(self) -> None:
        try:
            await self.conn.rollback()
        except Exception as e:
            logger.warning("rollback_failed", table=self.model.table_name, error=str(e))

    async def get(self, primary_key: Any) -> dict[str, Any] | None:
        async with self._operation("get", primary_key):
            rows = await self.run(self.model.select_statement(primary_key))
        return rows[0] if rows else None

    async def find_all(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        async with self._operation("find_all"):
            return await self.run(self.model.find_statement(query))

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        async with self._operation("create", mutation=True):
            rows = await self.run(self.model.insert_statement(data))
        return rows[0]

    async def update(self, primary_key: Any, data: Mapping[str, Any]) -> dict[str, Any]:
        async with self._operation("update", primary_key, mutation=True):
            rows = await self.run(self.model.update_statement(primary_key, data))
            if not rows:
                raise NotFoundError(self.model.table_name, self.model.primary_key, primary_key)
        return rows[0]

    async def remove(self, primary_key: Any) -> None:
        async with self._operation("remove", primary_key, mutation=True):
            rows = await self.run(self.model.delete_statement(primary_key))
            if not rows:
                raise NotFoundError(self.model.table_name, self.model.primary_key, primary_key)

    def __repr__(self) -> str:
        return f"AsyncTableAccessor({self.model!r})"


__all__ = ["TableAccessor", "AsyncTableAccessor"]
