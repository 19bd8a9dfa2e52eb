"""Tests for the parameterized statement builder."""

from __future__ import annotations

from tablespine.dialect import AsyncPGDialect, SQLAlchemyDialect, SQLiteDialect
from tablespine.statement import Param, Statement, StatementBuilder, fragment


class TestRender:
    def test_plain_text(self) -> None:
        stmt = StatementBuilder("SELECT 1").render(SQLiteDialect())
        assert stmt == Statement("SELECT 1", ())

    def test_params_numbered_in_order(self) -> None:
        b = StatementBuilder("SELECT id FROM items")
        b.where([fragment("price >= ", Param(10)), fragment("price <= ", Param(20))])

        stmt = b.render(AsyncPGDialect())
        assert stmt.sql == "SELECT id FROM items WHERE price >= $1 AND price <= $2"
        assert stmt.params == (10, 20)

    def test_same_fragments_any_dialect(self) -> None:
        b = StatementBuilder("UPDATE t SET ")
        b.join([fragment("a = ", Param(1)), fragment("b = ", Param(2))])
        b.where([fragment("id = ", Param(3))])

        assert b.render(SQLiteDialect()).sql == "UPDATE t SET a = ?, b = ? WHERE id = ?"
        assert b.render(SQLAlchemyDialect()).sql == "UPDATE t SET a = :p0, b = :p1 WHERE id = :p2"
        assert b.render(AsyncPGDialect()).params == (1, 2, 3)

    def test_render_is_repeatable(self) -> None:
        b = StatementBuilder("SELECT * FROM t WHERE id = ").param(7)
        assert b.render(AsyncPGDialect()) == b.render(AsyncPGDialect())


class TestBuilder:
    def test_where_without_predicates_is_noop(self) -> None:
        b = StatementBuilder("SELECT * FROM t").where([])
        assert b.render(SQLiteDialect()).sql == "SELECT * FROM t"

    def test_param_count(self) -> None:
        b = StatementBuilder("INSERT INTO t (a, b) VALUES (")
        b.join([fragment(Param("x")), fragment(Param(None))])
        b.text(")")
        assert b.param_count == 2
        assert b.render(SQLiteDialect()).params == ("x", None)

    def test_extend(self) -> None:
        b = StatementBuilder().extend(["SELECT ", Param(1)])
        assert b.render(AsyncPGDialect()).sql == "SELECT $1"

    def test_param_values_never_in_sql(self) -> None:
        b = StatementBuilder("SELECT * FROM t WHERE name = ").param("x'; DROP TABLE t; --")
        stmt = b.render(SQLiteDialect())
        assert "DROP" not in stmt.sql


class TestStatement:
    def test_unpacks(self) -> None:
        sql, params = Statement("SELECT ?", (1,))
        assert sql == "SELECT ?"
        assert params == (1,)
