"""Record matching helpers.

This module evaluates query predicates and equality filters against
schema-less records. It is shared by the query executor and the
mutation gateway so both agree on what "matches" means.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.constants import SUPPORTED_OPERATORS
from core.errors import CheforgQueryError
from core.types import Predicate, Record

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def strict_equals(left: Any, right: Any) -> bool:
    """Compare two field values without cross-type coercion.

    Booleans never equal numbers, so ``True`` does not match ``1``.
    """
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return bool(left == right)


def validate_predicate(predicate: Predicate) -> None:
    """Reject predicates the executor cannot evaluate.

    Args:
        predicate: Predicate to check.

    Raises:
        CheforgQueryError: If field, operator or operand is malformed.
    """
    if not isinstance(predicate.field, str) or not predicate.field:
        raise CheforgQueryError(
            f"Invalid filter field {predicate.field!r}: expected a non-empty string."
        )
    if predicate.operator not in SUPPORTED_OPERATORS:
        raise CheforgQueryError(
            f"Unknown filter operator '{predicate.operator}' on field '{predicate.field}'. "
            f"Supported operators: {', '.join(SUPPORTED_OPERATORS)}."
        )
    if predicate.operator == "in" and not isinstance(predicate.operand, _COLLECTION_TYPES):
        raise CheforgQueryError(
            f"Filter 'in' on field '{predicate.field}' expects a list of values, "
            f"got {type(predicate.operand).__name__}."
        )


def matches_predicate(record: Record, predicate: Predicate) -> bool:
    """Return whether one record satisfies one predicate.

    Missing fields read as ``None``. Range comparisons against ``None`` or
    values of an incomparable type never match.

    Raises:
        CheforgQueryError: If the predicate is malformed.
    """
    validate_predicate(predicate)
    value = record.get(predicate.field)
    operand = predicate.operand
    if predicate.operator == "eq":
        return strict_equals(value, operand)
    if predicate.operator == "in":
        return any(strict_equals(value, candidate) for candidate in operand)
    if value is None or operand is None:
        return False
    if isinstance(value, bool) != isinstance(operand, bool):
        return False
    try:
        if predicate.operator == "gte":
            return bool(value >= operand)
        return bool(value <= operand)
    except TypeError:
        return False


def matches_all(record: Record, predicates: tuple[Predicate, ...]) -> bool:
    """Return whether a record satisfies every predicate."""
    return all(matches_predicate(record, predicate) for predicate in predicates)


def matches_filters(record: Record, filters: Mapping[str, Any]) -> bool:
    """Return whether a record strictly equals every ``field: value`` pair."""
    return all(strict_equals(record.get(field), value) for field, value in filters.items())


def filter_records(records: list[Record], predicates: tuple[Predicate, ...]) -> list[Record]:
    """Keep records satisfying all predicates, preserving input order.

    Args:
        records: Table snapshot.
        predicates: Conditions combined with logical AND.

    Returns:
        Matching records in their original order.

    Raises:
        CheforgQueryError: If any predicate is malformed.
    """
    for predicate in predicates:
        validate_predicate(predicate)
    if not predicates:
        return list(records)
    return [record for record in records if matches_all(record, predicates)]
