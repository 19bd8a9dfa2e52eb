"""SQLAlchemy backend: engine factory, session class and Connection bridge.

``SAConnectionBridge`` lets a table accessor run on a SQLAlchemy ``Session``.
Statements rendered with :class:`~tablespine.dialect.SQLAlchemyDialect` use
``:p0, :p1, ...`` placeholders, and the bridge binds positional parameters
under exactly those names, so the SQL reaches ``text()`` untouched::

    engine = create_engine("postgresql://localhost/app", pool_size=5)
    bridge = SAConnectionBridge(session_factory(engine)())
    users = TableAccessor(
        bridge, "users", "username", columns,
        dialect=SQLAlchemyDialect(PostgreSQLDialect()),
    )

Tags:
    sqlalchemy, session, engine, bridge, connection, tablespine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event, text
from sqlalchemy.engine import Engine, Result
from sqlalchemy.orm import Session, sessionmaker


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(
    url: str = "sqlite://",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: int | None = None,
    **kwargs: Any,
) -> Engine:
    """SQLAlchemy engine for ``url``.

    SQLite engines get ``check_same_thread=False`` and foreign keys turned
    on; the pool options only apply to server databases.  Extra ``kwargs``
    go straight to :func:`sqlalchemy.create_engine`.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = _sa_create_engine(url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    pool_options = {
        name: value
        for name, value in (
            ("pool_size", pool_size),
            ("max_overflow", max_overflow),
            ("pool_timeout", pool_timeout),
        )
        if value is not None
    }
    return _sa_create_engine(url, echo=echo, **pool_options, **kwargs)


class TableSession(Session):
    """``Session`` that keeps loaded state after commit (``expire_on_commit=False``)."""

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def session_factory(engine: Engine) -> sessionmaker[TableSession]:
    return sessionmaker(bind=engine, class_=TableSession, expire_on_commit=False)


class SAConnectionBridge:
    """``tablespine.protocols.Connection`` on top of a SQLAlchemy ``Session``.

    Results of the last ``execute`` are read back with ``fetchone`` /
    ``fetchall``; ``description`` exposes their column names DB-API style.
    Transactions are the session's own.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._result: Result[Any] | None = None

    def _rows_available(self) -> bool:
        return self._result is not None and self._result.returns_rows

    def execute(self, sql: str, parameters: Sequence[Any] | None = None) -> SAConnectionBridge:
        bound = {f"p{i}": value for i, value in enumerate(parameters or ())}
        self._result = self._session.execute(text(sql), bound)
        return self

    def executemany(self, sql: str, seq_of_parameters: Sequence[Sequence[Any]]) -> None:
        for parameters in seq_of_parameters:
            self.execute(sql, parameters)

    def fetchone(self) -> tuple[Any, ...] | None:
        if not self._rows_available():
            return None
        row = self._result.fetchone()
        return None if row is None else tuple(row)

    def fetchall(self) -> list[tuple[Any, ...]]:
        if not self._rows_available():
            return []
        return [tuple(row) for row in self._result.fetchall()]

    @property
    def description(self) -> list[tuple[str, ...]] | None:
        if not self._rows_available():
            return None
        return [(name, None, None, None, None, None, None) for name in self._result.keys()]

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    def close(self) -> None:
        self._session.close()

    @property
    def session(self) -> Session:
        return self._session


__all__ = [
    "create_engine",
    "TableSession",
    "session_factory",
    "SAConnectionBridge",
]
