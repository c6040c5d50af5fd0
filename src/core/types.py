"""Shared typed models.

This module defines immutable query descriptions and the result
envelope returned by every store operation, keeping the contract
between the store and its callers explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

Record = dict[str, Any]
T = TypeVar("T")


@dataclass(frozen=True)
class Predicate:
    """One filter condition of a query.

    Attributes:
        field: Record field the condition reads.
        operator: One of ``eq``, ``gte``, ``lte`` or ``in``.
        operand: Value (or collection, for ``in``) compared against the field.
    """

    field: str
    operator: str
    operand: Any


@dataclass(frozen=True)
class OrderSpec:
    """Single-key sort applied after filtering.

    Attributes:
        field: Record field used as the sort key.
        ascending: Sort direction.
    """

    field: str
    ascending: bool = True


@dataclass(frozen=True)
class LimitSpec:
    """Take at most ``count`` rows from the start of the result."""

    count: int


@dataclass(frozen=True)
class RangeSpec:
    """Inclusive row window ``[start, end]`` over the sorted result."""

    start: int
    end: int


@dataclass(frozen=True)
class QuerySpec:
    """Immutable description of one select query.

    Attributes:
        predicates: Conditions combined with logical AND.
        order: Optional sort; a later order call replaces it.
        limit: Optional leading-row limit.
        range: Optional inclusive window; wins over ``limit`` when both are set.
        single: Project the result to its first row or ``None``.
    """

    predicates: tuple[Predicate, ...] = ()
    order: OrderSpec | None = None
    limit: LimitSpec | None = None
    range: RangeSpec | None = None
    single: bool = False


class ErrorKind(str, Enum):
    """Failure categories reported inside result envelopes."""

    INVALID_QUERY = "invalid_query"
    WRITE_FAILED = "write_failed"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ErrorInfo:
    """Failure details carried by a result envelope.

    Attributes:
        kind: Failure category.
        message: Human-readable description.
        cause: Underlying exception, when one was raised.
    """

    kind: ErrorKind
    message: str
    cause: BaseException | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, str]:
        """Serialize to a JSON-friendly mapping."""
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class ResultEnvelope(Generic[T]):
    """Uniform ``{data, error}`` result of a store operation.

    Attributes:
        data: Operation payload; ``None`` on failure or empty single result.
        error: Failure details; ``None`` on success.
    """

    data: T | None = None
    error: ErrorInfo | None = None

    @property
    def ok(self) -> bool:
        """Return whether the operation succeeded."""
        return self.error is None

    @classmethod
    def success(cls, data: T | None) -> "ResultEnvelope[T]":
        return cls(data=data, error=None)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        cause: BaseException | None = None,
    ) -> "ResultEnvelope[T]":
        return cls(data=None, error=ErrorInfo(kind=kind, message=message, cause=cause))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly mapping."""
        return {
            "data": self.data,
            "error": self.error.to_dict() if self.error is not None else None,
        }
