"""Tablespine -- generic CRUD access to one relational table.

Manifesto:
    Most tables need the same five operations: fetch one row by primary
    key, list rows by range and text search, insert, partially update,
    and delete.  Hand-writing that SQL per table drifts between tables and
    backends.  ``tablespine`` builds it from a table name, a primary key and
    a column list, always with bound parameters.

Architecture::

    Layer 1 -- Types & Errors
        errors.py          ErrorKind + TableError hierarchy (status codes)
        protocols.py       Connection / AsyncConnection protocols
        dialect.py         Placeholder + ILIKE rendering per backend

    Layer 2 -- SQL Synthesis
        statement.py       StatementBuilder (placeholders numbered at render)
        filters.py         FilterSchema (min_/max_ bounds, search)
        payload.py         Metadata stripping, column validation
        model.py           TableModel: SQL for get/find/insert/update/delete

    Layer 3 -- Execution
        repository.py      BaseRepository: driver errors -> StorageFaultError
        accessor.py        TableAccessor / AsyncTableAccessor

    Layer 4 -- Backends & Ambient
        connection.py      create_connection(url) -> (conn, ConnectionInfo)
        sqlite_conn.py     sqlite3 adapter
        session.py         SQLAlchemy engine + SAConnectionBridge
        asyncpg_conn.py    asyncpg pool helpers + adapter
        settings.py        TABLESPINE_* settings (pydantic-settings)
        logging.py         structlog configuration

Quick start::

    from tablespine import TableAccessor, create_connection

    conn, info = create_connection()
    conn.execute("CREATE TABLE users (username TEXT PRIMARY KEY, last_name TEXT)")
    users = TableAccessor(conn, "users", "username", ["username", "last_name"],
                          dialect=info.dialect)
    users.create({"username": "js", "last_name": "Smithson"})
    users.find_all({"search": "smit"})
"""

from tablespine.accessor import AsyncTableAccessor, TableAccessor
from tablespine.connection import ConnectionInfo, connect_from_settings, create_connection
from tablespine.dialect import (
    AsyncPGDialect,
    Dialect,
    PostgreSQLDialect,
    SQLAlchemyDialect,
    SQLiteDialect,
    get_dialect,
    register_dialect,
)
from tablespine.errors import (
    ErrorContext,
    ErrorKind,
    InvalidPayloadError,
    InvalidRangeError,
    NotFoundError,
    StorageFaultError,
    TableError,
    ValidationError,
)
from tablespine.filters import Comparator, FilterSchema, RangeFilter
from tablespine.model import TableModel
from tablespine.protocols import AsyncConnection, Connection
from tablespine.statement import Param, Statement, StatementBuilder

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # accessors
    "TableAccessor",
    "AsyncTableAccessor",
    "TableModel",
    # connections
    "Connection",
    "AsyncConnection",
    "ConnectionInfo",
    "create_connection",
    "connect_from_settings",
    # dialects
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "AsyncPGDialect",
    "SQLAlchemyDialect",
    "get_dialect",
    "register_dialect",
    # errors
    "ErrorKind",
    "ErrorContext",
    "TableError",
    "ValidationError",
    "InvalidRangeError",
    "InvalidPayloadError",
    "NotFoundError",
    "StorageFaultError",
    # filters / statements
    "Comparator",
    "FilterSchema",
    "RangeFilter",
    "Param",
    "Statement",
    "StatementBuilder",
]
