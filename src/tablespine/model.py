"""Table model: immutable table configuration plus statement synthesis.

A :class:`TableModel` is built once per table at process start from trusted
configuration (table name, primary-key column, column list).  It never
touches storage; it only turns request inputs into :class:`Statement`
objects.  Accessors pair a model with a connection.

Synthesis routines::

    select_statement(pk)        SELECT <cols> FROM t WHERE pk = ?
    find_statement(query)       SELECT <cols> FROM t [WHERE lower AND upper AND search]
    insert_statement(data)      INSERT INTO t (<keys>) VALUES (...) RETURNING <cols>
    update_statement(pk, data)  UPDATE t SET k1 = ?, ... WHERE pk = ? RETURNING *
    delete_statement(pk)        DELETE FROM t WHERE pk = ? RETURNING pk

Only identifiers from the model (columns, filter schema) reach SQL text;
every request value is bound through a placeholder.

Tags:
    sql, crud, statement-synthesis, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from tablespine.dialect import Dialect, SQLiteDialect
from tablespine.filters import FilterSchema
from tablespine.logging import get_logger
from tablespine.payload import persistable
from tablespine.statement import Fragment, Param, Statement, StatementBuilder, fragment

logger = get_logger(__name__)


class TableModel:
    """Configuration and SQL synthesis for one table.

    Parameters:
        table_name: Table identifier (trusted, not user input).
        primary_key: Primary-key column identifier.
        columns: Ordered column identifiers; copied into a tuple.
        dialect: Placeholder / matching style. Defaults to SQLite.
        filters: Filter schema for ``find_statement``. Defaults to
                 ``min_<col>`` / ``max_<col>`` bounds on every column.
        search_column: Column matched by the ``search`` filter. Defaults to
                       the second declared column; without one, ``search``
                       is ignored. Overrides the schema's search column.
    """

    def __init__(
        self,
        table_name: str,
        primary_key: str,
        columns: Iterable[str],
        *,
        dialect: Dialect | None = None,
        filters: FilterSchema | None = None,
        search_column: str | None = None,
    ) -> None:
        self._table_name = table_name
        self._primary_key = primary_key
        self._columns: tuple[str, ...] = tuple(columns)
        self._dialect: Dialect = dialect or SQLiteDialect()

        if search_column is None:
            if filters is not None and filters.search_column is not None:
                search_column = filters.search_column
            elif len(self._columns) > 1:
                search_column = self._columns[1]
        if filters is None:
            filters = FilterSchema.for_columns(self._columns, search_column=search_column)
        elif filters.search_column != search_column:
            filters = filters.with_search_column(search_column)
        self._filters = filters

    # -- read-only configuration ------------------------------------------

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def primary_key(self) -> str:
        return self._primary_key

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def filters(self) -> FilterSchema:
        return self._filters

    @property
    def search_column(self) -> str | None:
        return self._filters.search_column

    def _column_list(self) -> str:
        return ", ".join(self._columns)

    def _render(self, builder: StatementBuilder, operation: str) -> Statement:
        stmt = builder.render(self._dialect)
        logger.debug(
            "statement_built",
            table=self._table_name,
            operation=operation,
            param_count=len(stmt.params),
        )
        return stmt

    # -- synthesis ---------------------------------------------------------

    def select_statement(self, primary_key: Any) -> Statement:
        b = StatementBuilder(f"SELECT {self._column_list()} FROM {self._table_name}")
        b.where([fragment(f"{self._primary_key} = ", Param(primary_key))])
        return self._render(b, "get")

    def predicates(self, query: Mapping[str, Any] | None) -> list[Fragment]:
        """Predicate fragments for a query: lower bounds, upper bounds, search.

        Raises:
            InvalidRangeError: See :meth:`FilterSchema.parse`.
        """
        parsed = self._filters.parse(query)
        preds: list[Fragment] = []

        for column, value in parsed.lower.items():
            preds.append(fragment(f"{column} >= ", Param(value)))
        for column, value in parsed.upper.items():
            preds.append(fragment(f"{column} <= ", Param(value)))

        if parsed.search is not None:
            op = self._dialect.ilike_operator()
            preds.append(fragment(f"{self.search_column} {op} ", Param(f"%{parsed.search}%")))

        return preds

    def find_statement(self, query: Mapping[str, Any] | None = None) -> Statement:
        b = StatementBuilder(f"SELECT {self._column_list()} FROM {self._table_name}")
        b.where(self.predicates(query))
        return self._render(b, "find_all")

    def insert_statement(self, data: Mapping[str, Any]) -> Statement:
        """Raises InvalidPayloadError for empty payloads or unknown columns."""
        values = persistable(data, self._columns)

        b = StatementBuilder(f"INSERT INTO {self._table_name} ({', '.join(values)}) VALUES (")
        b.join([fragment(Param(v)) for v in values.values()])
        b.text(f") RETURNING {self._column_list()}")
        return self._render(b, "create")

    def update_statement(self, primary_key: Any, data: Mapping[str, Any]) -> Statement:
        """Raises InvalidPayloadError for empty payloads or unknown columns."""
        values = persistable(data, self._columns)

        b = StatementBuilder(f"UPDATE {self._table_name} SET ")
        b.join([fragment(f"{col} = ", Param(v)) for col, v in values.items()])
        b.where([fragment(f"{self._primary_key} = ", Param(primary_key))])
        b.text(" RETURNING *")
        return self._render(b, "update")

    def delete_statement(self, primary_key: Any) -> Statement:
        b = StatementBuilder(f"DELETE FROM {self._table_name}")
        b.where([fragment(f"{self._primary_key} = ", Param(primary_key))])
        b.text(f" RETURNING {self._primary_key}")
        return self._render(b, "remove")

    def __repr__(self) -> str:
        return (
            f"TableModel({self._table_name!r}, primary_key={self._primary_key!r}, "
            f"columns={list(self._columns)!r}, dialect={self._dialect.name!r})"
        )


__all__ = ["TableModel"]
