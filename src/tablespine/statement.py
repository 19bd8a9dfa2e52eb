"""Parameterized statement builder.

SQL text and bound values are collected together as parts: plain strings
for trusted SQL (keywords, identifiers) and :class:`Param` for values.
Placeholders are only produced by :meth:`StatementBuilder.render`, which
numbers every ``Param`` in the order it appears.  Placeholder count and
parameter count therefore cannot drift apart, however the fragments were
assembled.

Usage::

    b = StatementBuilder("SELECT id, name FROM items")
    b.where([
        fragment("price >= ", Param(10)),
        fragment("price <= ", Param(20)),
    ])
    stmt = b.render(AsyncPGDialect())
    stmt.sql     # 'SELECT id, name FROM items WHERE price >= $1 AND price <= $2'
    stmt.params  # (10, 20)

Tags:
    sql, statement-builder, placeholders, tablespine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from tablespine.dialect import Dialect


@dataclass(frozen=True, slots=True)
class Param:
    """A value to be bound to a placeholder."""

    value: Any


Part = Union[str, Param]
Fragment = tuple[Part, ...]


def fragment(*parts: Part) -> Fragment:
    """Group parts into one fragment (e.g. a single predicate)."""
    return tuple(parts)


@dataclass(frozen=True, slots=True)
class Statement:
    """Rendered statement: SQL text plus its ordered bound values."""

    sql: str
    params: tuple[Any, ...] = ()

    def __iter__(self):
        # allows ``sql, params = stmt``
        yield self.sql
        yield self.params


class StatementBuilder:
    """Accumulates SQL parts and renders them for a dialect."""

    def __init__(self, head: str = "") -> None:
        self._parts: list[Part] = []
        if head:
            self._parts.append(head)

    @property
    def param_count(self) -> int:
        return sum(1 for part in self._parts if isinstance(part, Param))

    def text(self, sql: str) -> StatementBuilder:
        self._parts.append(sql)
        return self

    def param(self, value: Any) -> StatementBuilder:
        self._parts.append(Param(value))
        return self

    def extend(self, parts: Iterable[Part]) -> StatementBuilder:
        self._parts.extend(parts)
        return self

    def join(self, fragments: Sequence[Fragment], sep: str = ", ") -> StatementBuilder:
        """Append fragments separated by ``sep``."""
        for i, frag in enumerate(fragments):
            if i:
                self._parts.append(sep)
            self._parts.extend(frag)
        return self

    def where(self, predicates: Sequence[Fragment]) -> StatementBuilder:
        """Append ``WHERE p1 AND p2 ...``; no-op when there are no predicates."""
        if predicates:
            self._parts.append(" WHERE ")
            self.join(predicates, " AND ")
        return self

    def render(self, dialect: Dialect) -> Statement:
        sql: list[str] = []
        params: list[Any] = []
        for part in self._parts:
            if isinstance(part, Param):
                sql.append(dialect.placeholder(len(params)))
                params.append(part.value)
            else:
                sql.append(part)
        return Statement("".join(sql), tuple(params))


__all__ = [
    "Param",
    "Part",
    "Fragment",
    "fragment",
    "Statement",
    "StatementBuilder",
]
