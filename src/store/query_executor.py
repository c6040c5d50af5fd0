"""Query execution over table snapshots.

This module turns a table snapshot and an immutable query spec into a
result envelope: filter, stable sort, paginate, then project. No
exception escapes ``run_query``; failures are returned in the envelope.
"""

from __future__ import annotations

from typing import Any

from core.errors import CheforgQueryError
from core.logging_config import get_logger
from core.types import ErrorKind, OrderSpec, QuerySpec, Record, ResultEnvelope
from store.collection_store import CollectionStore
from store.record_matching import filter_records

_LOGGER = get_logger(__name__)


def run_query(store: CollectionStore, table: str, spec: QuerySpec) -> ResultEnvelope[Any]:
    """Execute a query against a fresh snapshot of a table.

    Args:
        store: Collection store to read from.
        table: Table name.
        spec: Query description.

    Returns:
        Envelope holding a record list, a single record, or ``None``.
    """
    try:
        snapshot = store.get(table)
        rows = apply_query(snapshot, spec)
    except CheforgQueryError as error:
        _LOGGER.warning("query_rejected", table=table, error=str(error))
        return ResultEnvelope.failure(ErrorKind.INVALID_QUERY, str(error), error)
    except Exception as error:
        _LOGGER.error("query_failed", table=table, error=str(error))
        return ResultEnvelope.failure(
            ErrorKind.UNEXPECTED, f"Query on table '{table}' failed: {error}", error
        )
    if spec.single:
        return ResultEnvelope.success(rows[0] if rows else None)
    return ResultEnvelope.success(rows)


def apply_query(records: list[Record], spec: QuerySpec) -> list[Record]:
    """Filter, sort and paginate a snapshot.

    Args:
        records: Table snapshot in insertion order.
        spec: Query description.

    Returns:
        Paginated rows before single-row projection.

    Raises:
        CheforgQueryError: If the spec is malformed.
    """
    _validate_pagination(spec)
    rows = filter_records(records, spec.predicates)
    if spec.order is not None:
        rows = _sort_rows(rows, spec.order)
    if spec.range is not None:
        return rows[spec.range.start : spec.range.end + 1]
    if spec.limit is not None:
        return rows[: spec.limit.count]
    return rows


def _sort_rows(rows: list[Record], order: OrderSpec) -> list[Record]:
    """Stable single-key sort.

    Rows whose key is missing or ``None`` keep their relative order and go
    last in both directions. Present values of different types are grouped
    by type so every pair of keys is comparable.

    Args:
        rows: Filtered rows.
        order: Sort field and direction.

    Returns:
        New list of rows in sorted order.
    """
    present = [row for row in rows if row.get(order.field) is not None]
    missing = [row for row in rows if row.get(order.field) is None]
    ordered = sorted(
        present,
        key=lambda row: _sort_key(row[order.field]),
        reverse=not order.ascending,
    )
    return ordered + missing


def _sort_key(value: Any) -> tuple[int, Any]:
    """Map a value to a totally ordered key: booleans, numbers, text, other."""
    if isinstance(value, bool):
        return (0, value)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, repr(value))


def _validate_pagination(spec: QuerySpec) -> None:
    """Reject malformed order fields, negative limits and negative ranges.

    A reversed range is valid and selects no rows.

    Raises:
        CheforgQueryError: If pagination values are malformed.
    """
    if spec.order is not None and (not isinstance(spec.order.field, str) or not spec.order.field):
        raise CheforgQueryError(
            f"Invalid order field {spec.order.field!r}: expected a non-empty string."
        )
    if spec.limit is not None and not _is_non_negative_int(spec.limit.count):
        raise CheforgQueryError(
            f"Invalid limit {spec.limit.count!r}: expected a non-negative integer."
        )
    if spec.range is not None:
        start, end = spec.range.start, spec.range.end
        if not _is_non_negative_int(start) or not _is_non_negative_int(end):
            raise CheforgQueryError(
                f"Invalid range ({start!r}, {end!r}): expected non-negative integers."
            )


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
