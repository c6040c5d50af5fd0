"""Fluent immutable query builder.

Each builder method returns a new builder wrapping a new ``QuerySpec``;
the receiver is never changed, so a partially built query can be reused
as a template. Awaiting a builder runs the query against a fresh table
snapshot every time.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable
from dataclasses import replace
from typing import Any

from core.types import LimitSpec, OrderSpec, Predicate, QuerySpec, RangeSpec, ResultEnvelope
from store.collection_store import CollectionStore
from store.query_executor import run_query


class QueryBuilder:
    """Lazy, re-executable select query over one table."""

    def __init__(self, store: CollectionStore, table: str, spec: QuerySpec | None = None) -> None:
        self._store = store
        self._table = table
        self._spec = spec or QuerySpec()

    @property
    def table(self) -> str:
        return self._table

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def eq(self, field: str, value: Any) -> "QueryBuilder":
        """Keep rows whose ``field`` strictly equals ``value``."""
        return self.filter(field, "eq", value)

    def gte(self, field: str, value: Any) -> "QueryBuilder":
        """Keep rows whose ``field`` is greater than or equal to ``value``."""
        return self.filter(field, "gte", value)

    def lte(self, field: str, value: Any) -> "QueryBuilder":
        """Keep rows whose ``field`` is less than or equal to ``value``."""
        return self.filter(field, "lte", value)

    def in_(self, field: str, values: Iterable[Any]) -> "QueryBuilder":
        """Keep rows whose ``field`` equals one of ``values``."""
        operand: Any = values
        if isinstance(values, Iterable) and not isinstance(values, (str, bytes)):
            operand = tuple(values)
        return self.filter(field, "in", operand)

    def filter(self, field: str, operator: str, operand: Any) -> "QueryBuilder":
        """Append a predicate by operator name.

        Unknown operators are reported by the executor as an invalid query
        rather than raised here.
        """
        predicate = Predicate(field=field, operator=operator, operand=operand)
        return self._derive(predicates=self._spec.predicates + (predicate,))

    def order(self, field: str, ascending: bool = True) -> "QueryBuilder":
        """Sort by one field, replacing any earlier ordering."""
        return self._derive(order=OrderSpec(field=field, ascending=ascending))

    def limit(self, count: int) -> "QueryBuilder":
        """Return at most ``count`` rows from the start."""
        return self._derive(limit=LimitSpec(count=count))

    def range(self, start: int, end: int) -> "QueryBuilder":
        """Return rows ``start`` through ``end``, both inclusive.

        When both ``range`` and ``limit`` are set, ``range`` wins.
        """
        return self._derive(range=RangeSpec(start=start, end=end))

    def single(self) -> "QueryBuilder":
        """Project the result to its first row, or ``None`` when empty."""
        return self._derive(single=True)

    async def execute(self) -> ResultEnvelope[Any]:
        """Run the query against the current table contents."""
        return run_query(self._store, self._table, self._spec)

    def __await__(self) -> Generator[Any, None, ResultEnvelope[Any]]:
        return self.execute().__await__()

    def __repr__(self) -> str:
        return f"QueryBuilder(table={self._table!r}, spec={self._spec!r})"

    def _derive(self, **changes: Any) -> "QueryBuilder":
        return QueryBuilder(self._store, self._table, replace(self._spec, **changes))
