"""Unit tests for the immutable query builder."""

from __future__ import annotations

import asyncio
import itertools

from core.types import ErrorKind, OrderSpec
from store.collection_store import CollectionStore
from store.query_builder import QueryBuilder

_ORDERS = [
    {"id": 1, "table_id": 1, "status": "pronto", "total": 40.0},
    {"id": 2, "table_id": 2, "status": "preparando", "total": 15.5},
    {"id": 3, "table_id": 1, "status": "entregue", "total": 72.0},
    {"id": 4, "table_id": 3, "status": "pronto", "total": 9.9},
]


def _builder(store: CollectionStore) -> QueryBuilder:
    store.set("orders", _ORDERS)
    return QueryBuilder(store, "orders")


def test_builder_methods_do_not_mutate_receiver(store: CollectionStore) -> None:
    """Deriving a query should leave the base query unchanged."""
    base = _builder(store)

    derived = base.eq("table_id", 1)
    base_result = asyncio.run(base.execute())

    assert len(base_result.data) == 4 and derived.spec != base.spec


def test_base_builder_is_reusable_template(store: CollectionStore) -> None:
    """Two queries derived from one base should stay independent."""
    base = _builder(store).order("id")

    first = asyncio.run(base.eq("table_id", 1).execute())
    second = asyncio.run(base.eq("table_id", 2).execute())

    assert [row["id"] for row in first.data] == [1, 3]
    assert [row["id"] for row in second.data] == [2]


def test_predicate_order_does_not_change_result(store: CollectionStore) -> None:
    """AND of predicates should be independent of the order they are added."""
    base = _builder(store)
    steps = [
        lambda query: query.gte("total", 10),
        lambda query: query.in_("status", ["pronto", "entregue"]),
        lambda query: query.lte("table_id", 1),
    ]
    results = []
    for permutation in itertools.permutations(steps):
        query = base
        for step in permutation:
            query = step(query)
        results.append(asyncio.run(query.execute()).data)

    assert all(result == results[0] for result in results)
    assert [row["id"] for row in results[0]] == [1, 3]


def test_order_replaces_previous_order(store: CollectionStore) -> None:
    """The last order call should win."""
    query = _builder(store).order("total").order("id", ascending=False)

    assert query.spec.order == OrderSpec("id", ascending=False)


def test_single_returns_first_match(store: CollectionStore) -> None:
    """single() with several matches should return only the first."""
    result = asyncio.run(_builder(store).eq("status", "pronto").single().execute())

    assert result.data == _ORDERS[0]


def test_single_on_missing_id_is_null_success(store: CollectionStore) -> None:
    """single() with no match should succeed with None."""
    result = asyncio.run(_builder(store).eq("id", 999).single().execute())

    assert result.ok and result.data is None


def test_builder_is_awaitable(store: CollectionStore) -> None:
    """Awaiting the builder directly should execute the query."""

    async def scenario() -> object:
        return await _builder(store).eq("id", 2).single()

    result = asyncio.run(scenario())

    assert result.data["status"] == "preparando"


def test_each_await_reads_fresh_snapshot(store: CollectionStore) -> None:
    """Re-awaiting a query should observe writes made in between."""
    query = _builder(store).eq("table_id", 3)
    before = asyncio.run(query.execute())
    store.set("orders", _ORDERS + [{"id": 5, "table_id": 3}])

    after = asyncio.run(query.execute())

    assert len(before.data) == 1 and len(after.data) == 2


def test_unknown_operator_is_reported_on_execute(store: CollectionStore) -> None:
    """filter() with an unknown operator should build but fail on execute."""
    query = _builder(store).filter("status", "ilike", "pro%")

    result = asyncio.run(query.execute())

    assert result.error is not None and result.error.kind is ErrorKind.INVALID_QUERY


def test_in_accepts_generators(store: CollectionStore) -> None:
    """in_() should materialize one-shot iterables so re-execution works."""
    query = _builder(store).in_("id", (value for value in (1, 4)))

    first = asyncio.run(query.execute())
    second = asyncio.run(query.execute())

    assert first.data == second.data and len(first.data) == 2
