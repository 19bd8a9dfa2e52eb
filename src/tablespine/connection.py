"""Connection factory: create database connections from URL strings.

``create_connection()`` returns ``(conn, ConnectionInfo)``.  ``conn``
satisfies the :class:`~tablespine.protocols.Connection` protocol and
``info.dialect`` is the dialect an accessor on that connection must use.

Supported URL schemes
---------------------

==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                SQLite file
``(file path)``     ``./data/app.db``                            SQLite file
``postgresql``      ``postgresql://user:pw@host:port/db``        PostgreSQL
``postgres``        ``postgres://user:pw@host:port/db``          PostgreSQL
==================  ==========================================  ============

Usage
-----
::

    from tablespine.connection import create_connection

    conn, info = create_connection("app.db")
    users = TableAccessor(conn, "users", "username", columns, dialect=info.dialect)

A PostgreSQL URL that cannot be reached raises
:class:`~tablespine.errors.StorageFaultError`; there is no silent fallback
to another backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tablespine.dialect import Dialect, PostgreSQLDialect, SQLAlchemyDialect, SQLiteDialect
from tablespine.errors import StorageFaultError
from tablespine.logging import get_logger

if TYPE_CHECKING:
    from tablespine.settings import TableSpineSettings

logger = get_logger(__name__)


# ── ConnectionInfo ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier: ``"sqlite"`` or ``"postgresql"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={self.url!r}")
        return f"ConnectionInfo({', '.join(parts)})"

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    @property
    def is_postgres(self) -> bool:
        return self.backend == "postgresql"

    @property
    def dialect(self) -> Dialect:
        """Dialect matching the connection object returned alongside."""
        if self.is_postgres:
            return SQLAlchemyDialect(PostgreSQLDialect())
        return SQLiteDialect()


# ── Backends ─────────────────────────────────────────────────────────────


def _create_sqlite_memory() -> tuple[Any, ConnectionInfo]:
    from tablespine.sqlite_conn import SqliteConnection

    conn = SqliteConnection(":memory:")
    return conn, ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")


def _create_sqlite_file(path_str: str, data_dir: str | None = None) -> tuple[Any, ConnectionInfo]:
    from tablespine.sqlite_conn import SqliteConnection

    path = Path(path_str)
    if data_dir and not path.is_absolute():
        path = Path(data_dir) / path
    path.parent.mkdir(parents=True, exist_ok=True)
    resolved = str(path.resolve())

    conn = SqliteConnection(resolved)
    info = ConnectionInfo(backend="sqlite", persistent=True, url=path_str, resolved_path=resolved)
    return conn, info


def _create_postgresql(url: str, **engine_kwargs: Any) -> tuple[Any, ConnectionInfo]:
    """Create a PostgreSQL connection via the SQLAlchemy bridge."""
    from tablespine.session import SAConnectionBridge, TableSession, create_engine

    try:
        engine = create_engine(url, **engine_kwargs)
        with engine.connect():
            pass
    except Exception as e:
        logger.error("connection_failed", backend="postgresql", error=str(e))
        raise StorageFaultError(f"Cannot connect to PostgreSQL: {e}", cause=e) from e

    conn = SAConnectionBridge(TableSession(bind=engine))
    return conn, ConnectionInfo(backend="postgresql", persistent=True, url=url)


# ── URL parsing ──────────────────────────────────────────────────────────


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into (scheme, target).

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"postgresql"``,
    ``"file"``.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if db.startswith(("postgresql://", "postgres://", "postgresql+", "postgres+")):
        # sync bridge: drop any driver suffix, SQLAlchemy only knows "postgresql"
        rest = db.split("://", 1)[1]
        return "postgresql", f"postgresql://{rest}"

    return "file", db


# ── Main factory ─────────────────────────────────────────────────────────


def create_connection(
    db: str | None = None,
    *,
    data_dir: str | None = None,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
) -> tuple[Any, ConnectionInfo]:
    """Create a database connection from a URL, path, or keyword.

    Parameters
    ----------
    db:
        ``None`` / ``"memory"`` for in-memory SQLite, a file path or
        ``sqlite:///`` URL for file SQLite, or a ``postgresql://`` URL.
    data_dir:
        Directory that relative SQLite paths are resolved against.
    echo, pool_size, max_overflow:
        Engine options for PostgreSQL.

    Raises
    ------
    StorageFaultError
        PostgreSQL is unreachable.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        conn, info = _create_sqlite_memory()
    elif scheme in ("sqlite", "file"):
        conn, info = _create_sqlite_file(target, data_dir)
    else:
        conn, info = _create_postgresql(
            target, echo=echo, pool_size=pool_size, max_overflow=max_overflow
        )

    logger.info("connection_created", backend=info.backend, persistent=info.persistent)
    return conn, info


def connect_from_settings(settings: TableSpineSettings | None = None) -> tuple[Any, ConnectionInfo]:
    """``create_connection`` driven by :class:`TableSpineSettings`."""
    if settings is None:
        from tablespine.settings import get_settings

        settings = get_settings()

    return create_connection(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )


__all__ = ["ConnectionInfo", "create_connection", "connect_from_settings"]
