"""Tests for the SQLAlchemy engine factory and SAConnectionBridge."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import text

from conftest import SEED_USERS, USER_COLUMNS, USERS_DDL, requires_returning
from tablespine.accessor import TableAccessor
from tablespine.dialect import SQLAlchemyDialect
from tablespine.errors import NotFoundError, StorageFaultError
from tablespine.protocols import Connection
from tablespine.session import SAConnectionBridge, TableSession, create_engine, session_factory


@pytest.fixture
def bridge() -> Generator[SAConnectionBridge, None, None]:
    engine = create_engine("sqlite://")
    session = session_factory(engine)()
    session.execute(text(USERS_DDL))
    for user in SEED_USERS:
        cols = ", ".join(user)
        marks = ", ".join(f":{c}" for c in user)
        session.execute(text(f"INSERT INTO users ({cols}) VALUES ({marks})"), user)
    session.commit()

    b = SAConnectionBridge(session)
    yield b
    b.close()
    engine.dispose()


@pytest.fixture
def users(bridge: SAConnectionBridge) -> TableAccessor:
    return TableAccessor(bridge, "users", "username", USER_COLUMNS, dialect=SQLAlchemyDialect())


class TestEngine:
    def test_sqlite_engine(self) -> None:
        engine = create_engine("sqlite://", echo=False)
        assert engine.dialect.name == "sqlite"
        engine.dispose()

    def test_session_factory(self) -> None:
        engine = create_engine("sqlite://")
        session = session_factory(engine)()
        assert isinstance(session, TableSession)
        assert session.expire_on_commit is False
        session.close()
        engine.dispose()


class TestBridge:
    def test_satisfies_protocol(self, bridge: SAConnectionBridge) -> None:
        assert isinstance(bridge, Connection)

    def test_named_params(self, bridge: SAConnectionBridge) -> None:
        bridge.execute("SELECT username FROM users WHERE age >= :p0 AND age <= :p1", (20, 30))
        assert bridge.fetchall() == [("js",)]

    def test_description(self, bridge: SAConnectionBridge) -> None:
        bridge.execute("SELECT username, age FROM users WHERE username = :p0", ("ann",))
        assert [d[0] for d in bridge.description] == ["username", "age"]
        assert bridge.fetchone() == ("ann", 34)

    def test_nothing_executed(self) -> None:
        engine = create_engine("sqlite://")
        b = SAConnectionBridge(session_factory(engine)())
        assert b.fetchall() == []
        assert b.fetchone() is None
        assert b.description is None
        b.close()
        engine.dispose()


@requires_returning
class TestAccessorOverBridge:
    def test_get(self, users: TableAccessor) -> None:
        assert users.get("bob")["last_name"] == "Brown"
        assert users.get("nobody") is None

    def test_find_all(self, users: TableAccessor) -> None:
        rows = users.find_all({"min_age": 20, "search": "smit"})
        assert [r["username"] for r in rows] == ["js"]

    def test_crud(self, users: TableAccessor) -> None:
        created = users.create({"username": "sa", "last_name": "Alchemy", "_csrf": "x"})
        assert created["username"] == "sa"

        updated = users.update("sa", {"age": 20})
        assert updated["age"] == 20
        assert updated["last_name"] == "Alchemy"

        users.remove("sa")
        assert users.get("sa") is None

    def test_not_found(self, users: TableAccessor) -> None:
        with pytest.raises(NotFoundError):
            users.remove("nobody")

    def test_fault_then_recovers(self, users: TableAccessor) -> None:
        with pytest.raises(StorageFaultError):
            users.create({"username": "ann", "last_name": "Dup"})
        # rolled back, the session is usable again
        assert users.get("ann")["last_name"] == "Anderson"
