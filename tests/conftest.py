"""
Shared pytest fixtures and configuration for tablespine tests.

This module provides:
- An in-memory SQLite ``users`` table seeded with a few rows
- Accessors bound to that table (sync)
- Test marker auto-assignment by location

Usage:
    Fixtures are auto-discovered by pytest; request them as arguments.

    def test_something(users: TableAccessor):
        ...
"""

import sqlite3
import sys
from pathlib import Path
from typing import Any, Generator

import pytest

# Ensure tablespine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tablespine.accessor import TableAccessor
from tablespine.sqlite_conn import SqliteConnection

# INSERT/UPDATE/DELETE ... RETURNING
requires_returning = pytest.mark.skipif(
    sqlite3.sqlite_version_info < (3, 35, 0),
    reason="SQLite >= 3.35 required for RETURNING",
)

USER_COLUMNS = ["username", "last_name", "first_name", "email", "age", "status"]

USERS_DDL = """
CREATE TABLE users (
    username   TEXT PRIMARY KEY,
    last_name  TEXT NOT NULL,
    first_name TEXT,
    email      TEXT UNIQUE,
    age        INTEGER,
    status     TEXT DEFAULT 'pending'
)
"""

SEED_USERS: list[dict[str, Any]] = [
    {"username": "ann", "last_name": "Anderson", "first_name": "Ann", "email": "ann@example.com", "age": 34},
    {"username": "js", "last_name": "Smithson", "first_name": "Jo", "email": "js@example.com", "age": 28},
    {"username": "bob", "last_name": "Brown", "first_name": "Bob", "email": "bob@example.com", "age": 45},
    {"username": "kim", "last_name": "Smith", "first_name": "Kim", "email": "kim@example.com", "age": 19},
]


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Database Fixtures
# =============================================================================


def seed_users(conn: Any) -> None:
    for user in SEED_USERS:
        cols = ", ".join(user)
        marks = ", ".join("?" for _ in user)
        conn.execute(f"INSERT INTO users ({cols}) VALUES ({marks})", tuple(user.values()))
    conn.commit()


@pytest.fixture
def sqlite_conn() -> Generator[SqliteConnection, None, None]:
    """In-memory SQLite connection with a seeded ``users`` table."""
    conn = SqliteConnection(":memory:")
    conn.execute(USERS_DDL)
    seed_users(conn)
    yield conn
    conn.close()


@pytest.fixture
def users(sqlite_conn: SqliteConnection) -> TableAccessor:
    """Accessor over the seeded ``users`` table (search column: last_name)."""
    return TableAccessor(sqlite_conn, "users", "username", USER_COLUMNS)


@pytest.fixture
def raw_conn() -> Generator[sqlite3.Connection, None, None]:
    """Plain ``sqlite3`` connection (tuple rows) with the seeded table."""
    conn = sqlite3.connect(":memory:")
    conn.execute(USERS_DDL)
    seed_users(conn)
    yield conn
    conn.close()
