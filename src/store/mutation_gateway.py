"""Mutation gateway for table writes.

Every mutation is a read-modify-write of a whole table: load the
snapshot, transform it in memory, persist it back. Mutations on the
same table are serialized with one lock per table so concurrent
writers cannot lose each other's updates. Reads are never locked.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping, Sequence

from core.constants import CREATED_AT_FIELD, ID_FIELD, PROTECTED_PATCH_FIELDS, UPDATED_AT_FIELD
from core.errors import CheforgQueryError, CheforgStoreWriteError
from core.logging_config import get_logger
from core.types import ErrorKind, Record, ResultEnvelope
from store.collection_store import CollectionStore
from store.record_identity import Clock, format_timestamp, generate_record_id, utc_now
from store.record_matching import matches_filters

_LOGGER = get_logger(__name__)


class MutationGateway:
    """Insert, update and delete entry points returning result envelopes.

    No exception raised while mutating escapes a gateway call; failures
    come back as ``ResultEnvelope.error``.
    """

    def __init__(self, store: CollectionStore, clock: Clock = utc_now) -> None:
        """Create a gateway.

        Args:
            store: Collection store to read and persist tables.
            clock: Source of the current time for ids and timestamps.
        """
        self._store = store
        self._clock = clock
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def insert(
        self, table: str, values: Record | Sequence[Record]
    ) -> ResultEnvelope[list[Record]]:
        """Append one or more records to a table.

        Records without an ``id`` get a generated one; ``created_at`` is set
        when absent and ``updated_at`` is always stamped.

        Args:
            table: Table name.
            values: A record or a sequence of records.

        Returns:
            Envelope holding the stamped records as persisted.
        """

        def body() -> list[Record]:
            rows = _normalize_rows(values)
            timestamp = format_timestamp(self._clock())
            stamped = [self._stamp_new_record(row, timestamp) for row in rows]
            snapshot = self._store.get(table)
            self._store.set(table, snapshot + stamped)
            _LOGGER.info("rows_inserted", table=table, row_count=len(stamped))
            return stamped

        return self._mutate(table, "insert", body)

    def update(
        self, table: str, patch: Mapping[str, Any], match_field: str, match_value: Any
    ) -> ResultEnvelope[list[Record]]:
        """Shallow-merge ``patch`` into rows where ``match_field`` equals ``match_value``."""
        return self._mutate(
            table,
            "update",
            lambda: self._apply_update(table, patch, _single_filter(match_field, match_value)),
        )

    def update_with_match(
        self, table: str, patch: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> ResultEnvelope[list[Record]]:
        """Shallow-merge ``patch`` into rows equal to every ``filters`` pair."""
        return self._mutate(
            table, "update", lambda: self._apply_update(table, patch, _check_filters(filters))
        )

    def delete(self, table: str, match_field: str, match_value: Any) -> ResultEnvelope[None]:
        """Remove rows where ``match_field`` equals ``match_value``."""
        return self._mutate(
            table,
            "delete",
            lambda: self._apply_delete(table, _single_filter(match_field, match_value)),
        )

    def delete_with_match(self, table: str, filters: Mapping[str, Any]) -> ResultEnvelope[None]:
        """Remove rows equal to every ``filters`` pair."""
        return self._mutate(
            table, "delete", lambda: self._apply_delete(table, _check_filters(filters))
        )

    def _apply_update(
        self, table: str, patch: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> list[Record]:
        """Merge a patch into matching rows and persist the table.

        Args:
            table: Table name.
            patch: Fields to set; protected fields are dropped.
            filters: Equality pairs a row must satisfy.

        Returns:
            The matched rows after patching.

        Raises:
            CheforgQueryError: If the patch is not a mapping.
        """
        if not isinstance(patch, Mapping):
            raise CheforgQueryError(
                f"Invalid update patch for table '{table}': expected a mapping, "
                f"got {type(patch).__name__}."
            )
        changes = {key: value for key, value in patch.items() if key not in PROTECTED_PATCH_FIELDS}
        timestamp = format_timestamp(self._clock())
        rows: list[Record] = []
        updated: list[Record] = []
        for record in self._store.get(table):
            if matches_filters(record, filters):
                record = {**record, **changes, UPDATED_AT_FIELD: timestamp}
                updated.append(record)
            rows.append(record)
        self._store.set(table, rows)
        _LOGGER.info("rows_updated", table=table, row_count=len(updated))
        return updated

    def _apply_delete(self, table: str, filters: Mapping[str, Any]) -> None:
        """Persist the table without rows matching every filter pair.

        Args:
            table: Table name.
            filters: Equality pairs a row must satisfy to be removed.
        """
        snapshot = self._store.get(table)
        remaining = [record for record in snapshot if not matches_filters(record, filters)]
        self._store.set(table, remaining)
        _LOGGER.info("rows_deleted", table=table, row_count=len(snapshot) - len(remaining))
        return None

    def _stamp_new_record(self, row: Record, timestamp: str) -> Record:
        """Copy a row and fill in its id and timestamps.

        Args:
            row: Caller-supplied record.
            timestamp: Insert time shared by the whole batch.

        Returns:
            New record with ``id``, ``created_at`` and ``updated_at`` set.
        """
        record = dict(row)
        if record.get(ID_FIELD) is None:
            record[ID_FIELD] = generate_record_id(self._clock)
        if not record.get(CREATED_AT_FIELD):
            record[CREATED_AT_FIELD] = timestamp
        record[UPDATED_AT_FIELD] = timestamp
        return record

    def _mutate(
        self, table: str, operation: str, body: Callable[[], Any]
    ) -> ResultEnvelope[Any]:
        """Run a mutation body under the table lock and wrap its outcome.

        Args:
            table: Table name used for locking and logging.
            operation: Operation label for log events.
            body: Read-modify-write callable.

        Returns:
            Success envelope with the body's result, or a failure envelope.
        """
        with self._table_lock(table):
            try:
                return ResultEnvelope.success(body())
            except CheforgStoreWriteError as error:
                return ResultEnvelope.failure(ErrorKind.WRITE_FAILED, str(error), error)
            except CheforgQueryError as error:
                _LOGGER.warning(
                    "mutation_rejected", table=table, operation=operation, error=str(error)
                )
                return ResultEnvelope.failure(ErrorKind.INVALID_QUERY, str(error), error)
            except Exception as error:
                _LOGGER.error(
                    "mutation_failed", table=table, operation=operation, error=str(error)
                )
                return ResultEnvelope.failure(
                    ErrorKind.UNEXPECTED, f"{operation} on table '{table}' failed: {error}", error
                )

    def _table_lock(self, table: str) -> threading.Lock:
        """Return the lock serializing writes to one table, creating it once."""
        with self._locks_guard:
            lock = self._locks.get(table)
            if lock is None:
                lock = threading.Lock()
                self._locks[table] = lock
            return lock


def _normalize_rows(values: Record | Sequence[Record]) -> list[Record]:
    """Turn one record or a sequence of records into a list of dicts.

    Raises:
        CheforgQueryError: If any element is not a mapping.
    """
    if isinstance(values, Mapping):
        rows: list[Any] = [values]
    elif isinstance(values, (list, tuple)):
        rows = list(values)
    else:
        raise CheforgQueryError(
            f"Invalid insert payload: expected a record or a list of records, "
            f"got {type(values).__name__}."
        )
    for row in rows:
        if not isinstance(row, Mapping):
            raise CheforgQueryError(
                f"Invalid record {row!r}: expected a mapping of field names to values."
            )
    return [dict(row) for row in rows]


def _single_filter(match_field: str, match_value: Any) -> dict[str, Any]:
    """Build a one-pair filter for an ``eq`` mutation.

    Args:
        match_field: Field to compare.
        match_value: Value the field must strictly equal.

    Returns:
        Filter mapping.

    Raises:
        CheforgQueryError: If the field is not a non-empty string.
    """
    if not isinstance(match_field, str) or not match_field:
        raise CheforgQueryError(
            f"Invalid match field {match_field!r}: expected a non-empty string."
        )
    return {match_field: match_value}


def _check_filters(filters: Mapping[str, Any]) -> Mapping[str, Any]:
    """Validate match filters.

    Raises:
        CheforgQueryError: If ``filters`` is not a mapping.
    """
    if not isinstance(filters, Mapping):
        raise CheforgQueryError(
            f"Invalid match filters: expected a mapping, got {type(filters).__name__}."
        )
    return filters
