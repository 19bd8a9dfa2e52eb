"""SQL dialect abstraction for backend-agnostic statement synthesis.

A table accessor never formats placeholders or case-insensitive matches
itself; it asks its ``Dialect``.  The statement builder passes each bound
value's 0-based position to :meth:`Dialect.placeholder` at render time, so
numbered styles (``$1``, ``:p0``) and anonymous styles (``?``, ``%s``) are
rendered from the same fragments.

Architecture::

    ┌──────────┐ ┌──────────────┐ ┌─────────────┐ ┌──────────────────┐
    │ SQLite   │ │ PostgreSQL   │ │ asyncpg     │ │ SQLAlchemy text  │
    │ ?, ?     │ │ %s, %s       │ │ $1, $2      │ │ :p0, :p1         │
    │ LIKE     │ │ ILIKE        │ │ ILIKE       │ │ (inner dialect)  │
    └──────────┘ └──────────────┘ └─────────────┘ └──────────────────┘

Examples:
    >>> from tablespine.dialect import get_dialect
    >>> d = get_dialect("asyncpg")
    >>> d.placeholder(0)
    '$1'
    >>> d.ilike_operator()
    'ILIKE'

Tags:
    dialect, sql, abstraction, portability, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment valid for the target backend.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Single placeholder for the value at 0-based ``index``.

        ``index`` is ignored by anonymous styles (SQLite ``?``, psycopg
        ``%s``) but required by numbered ones (asyncpg ``$1``).
        """
        ...

    def ilike_operator(self) -> str:
        """Operator for a case-insensitive ``LIKE`` match (``ILIKE`` / ``LIKE``)."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``LIKE`` (case-insensitive for ASCII)."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def ilike_operator(self) -> str:
        return "LIKE"


class PostgreSQLDialect:
    """PostgreSQL dialect for psycopg: ``%s`` placeholders, ``ILIKE``."""

    @property
    def name(self) -> str:
        return "postgresql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def ilike_operator(self) -> str:
        return "ILIKE"


class AsyncPGDialect(PostgreSQLDialect):
    """PostgreSQL dialect for asyncpg: ``$1, $2`` numbered placeholders."""

    @property
    def name(self) -> str:
        return "asyncpg"

    def placeholder(self, index: int) -> str:
        return f"${index + 1}"


class SQLAlchemyDialect:
    """Named ``:p0, :p1`` placeholders for ``sqlalchemy.text()``.

    Matching syntax is delegated to the dialect of the database behind the
    engine.  Pairs with :class:`~tablespine.session.SAConnectionBridge`,
    which binds positional parameters under the same ``p<index>`` names.
    """

    def __init__(self, inner: Dialect | None = None) -> None:
        self.inner: Dialect = inner or SQLiteDialect()

    @property
    def name(self) -> str:
        return f"sqlalchemy+{self.inner.name}"

    def placeholder(self, index: int) -> str:
        return f":p{index}"

    def ilike_operator(self) -> str:
        return self.inner.ilike_operator()

    def __repr__(self) -> str:
        return f"SQLAlchemyDialect({self.inner.name!r})"


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
    "asyncpg": AsyncPGDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        db_type: One of ``'sqlite'``, ``'postgresql'``, ``'postgres'``,
                 ``'asyncpg'`` or a name added with :func:`register_dialect`.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (lookup key is lower-cased)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "AsyncPGDialect",
    "SQLAlchemyDialect",
    "get_dialect",
    "register_dialect",
]
