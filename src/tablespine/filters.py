"""Explicit filter schema for ``find_all`` queries.

A query is a plain mapping (typically parsed query-string parameters).
Which keys mean anything is declared up front in a :class:`FilterSchema`:
each recognised filter name maps to a (column, comparator) pair, and the
reserved ``search`` key maps to the search column.  Column names are read
from the schema, never from the query keys themselves.

The default schema for a table gives every declared column a ``min_<col>``
lower bound and a ``max_<col>`` upper bound:

    >>> schema = FilterSchema.for_columns(["id", "name", "price"])
    >>> schema.get("min_price")
    RangeFilter(name='min_price', column='price', comparator=<Comparator.GTE: '>='>)
    >>> parsed = schema.parse({"min_price": 10, "search": "ann", "page": 2})
    >>> parsed.lower, parsed.search
    ({'price': 10}, 'ann')

Tags:
    query, filters, validation, tablespine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tablespine.errors import InvalidRangeError
from tablespine.logging import get_logger

logger = get_logger(__name__)

SEARCH_KEY = "search"
MIN_PREFIX = "min_"
MAX_PREFIX = "max_"


class Comparator(str, Enum):
    GTE = ">="
    LTE = "<="

    @property
    def is_lower(self) -> bool:
        return self is Comparator.GTE


@dataclass(frozen=True, slots=True)
class RangeFilter:
    """Maps a query key to an inclusive bound on one column."""

    name: str
    column: str
    comparator: Comparator


@dataclass
class ParsedQuery:
    """Filters honoured for one query, keyed by column.

    ``lower`` and ``upper`` keep the query's key order; for a column given
    twice in the same direction the later key wins.
    """

    lower: dict[str, Any] = field(default_factory=dict)
    upper: dict[str, Any] = field(default_factory=dict)
    search: str | None = None

    def __bool__(self) -> bool:
        return bool(self.lower or self.upper or self.search)


class FilterSchema:
    """Registry of the filters a table accepts."""

    def __init__(
        self,
        filters: Iterable[RangeFilter] = (),
        *,
        search_column: str | None = None,
    ) -> None:
        self._filters: dict[str, RangeFilter] = {f.name: f for f in filters}
        self.search_column = search_column

    @classmethod
    def for_columns(
        cls,
        columns: Iterable[str],
        *,
        search_column: str | None = None,
    ) -> FilterSchema:
        """Default schema: ``min_<col>`` / ``max_<col>`` for every column."""
        filters: list[RangeFilter] = []
        for column in columns:
            filters.append(RangeFilter(f"{MIN_PREFIX}{column}", column, Comparator.GTE))
            filters.append(RangeFilter(f"{MAX_PREFIX}{column}", column, Comparator.LTE))
        return cls(filters, search_column=search_column)

    def with_search_column(self, search_column: str | None) -> FilterSchema:
        """Copy of this schema searching ``search_column``."""
        return FilterSchema(self._filters.values(), search_column=search_column)

    def get(self, name: str) -> RangeFilter | None:
        return self._filters.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._filters)

    def __contains__(self, name: object) -> bool:
        return name in self._filters or (name == SEARCH_KEY and self.search_column is not None)

    def __len__(self) -> int:
        return len(self._filters)

    def parse(self, query: Mapping[str, Any] | None) -> ParsedQuery:
        """Classify query keys and validate ranges.

        Raises:
            InvalidRangeError: A column has both bounds and upper < lower,
                or the two bounds cannot be compared.
        """
        parsed = ParsedQuery()
        if not query:
            return parsed

        for key, value in query.items():
            if key == SEARCH_KEY:
                if self.search_column is None:
                    logger.debug("filter_ignored", key=key, reason="no search column")
                elif value:
                    parsed.search = str(value)
                continue

            flt = self._filters.get(key)
            if flt is None:
                logger.debug("filter_ignored", key=key, reason="unrecognised")
                continue
            if value is None:
                continue

            bounds = parsed.lower if flt.comparator.is_lower else parsed.upper
            bounds.pop(flt.column, None)
            bounds[flt.column] = value

        self._check_ranges(parsed)
        return parsed

    @staticmethod
    def _check_ranges(parsed: ParsedQuery) -> None:
        for column, lower in parsed.lower.items():
            if column not in parsed.upper:
                continue
            upper = parsed.upper[column]
            try:
                inverted = upper < lower
            except TypeError as e:
                raise InvalidRangeError(
                    column, lower, upper, message=f"Cannot compare min and max for {column}"
                ) from e
            if inverted:
                raise InvalidRangeError(column, lower, upper)


__all__ = [
    "SEARCH_KEY",
    "Comparator",
    "RangeFilter",
    "ParsedQuery",
    "FilterSchema",
]
