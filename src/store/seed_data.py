"""Seed fixture loading.

A seed file is a JSON object mapping table names to arrays of records.
Rows are inserted through the mutation gateway, so rows without ids or
timestamps get them stamped like any other insert.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.errors import CheforgStoreError
from core.logging_config import get_logger
from core.types import Record, ResultEnvelope
from store.store_client import StoreClient

_LOGGER = get_logger(__name__)


def read_seed_file(seed_path: Path) -> dict[str, list[Record]]:
    """Read and validate a seed fixture.

    Args:
        seed_path: JSON seed file path.

    Returns:
        Mapping of table name to records.

    Raises:
        CheforgStoreError: If the file is missing or malformed.
    """
    if not seed_path.exists():
        raise CheforgStoreError(f"Seed file not found at {seed_path}.")
    try:
        payload = json.loads(seed_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise CheforgStoreError(
            f"Failed to parse seed file at {seed_path}: {error.msg}. "
            "Seed files must be a JSON object of table name to record arrays."
        ) from error
    if not isinstance(payload, dict):
        raise CheforgStoreError(
            f"Failed to parse seed file at {seed_path}: expected JSON object at top level."
        )
    for table, rows in payload.items():
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise CheforgStoreError(
                f"Invalid seed rows for table '{table}' in {seed_path}: "
                "expected an array of JSON objects."
            )
    return payload


async def seed_tables(
    client: StoreClient,
    payload: dict[str, list[Record]],
    replace_existing: bool = False,
) -> dict[str, ResultEnvelope[Any]]:
    """Insert seed rows table by table.

    Each table is committed independently; a failure in one table does
    not roll back tables seeded before it.

    Args:
        client: Store client to write through.
        payload: Mapping of table name to records.
        replace_existing: Clear each table before inserting.

    Returns:
        Insert envelope per table.
    """
    results: dict[str, ResultEnvelope[Any]] = {}
    for table, rows in payload.items():
        handle = client.from_(table)
        if replace_existing:
            cleared = await handle.delete().match({})
            if not cleared.ok:
                results[table] = cleared
                continue
        results[table] = await handle.insert(rows)
        _LOGGER.info("table_seeded", table=table, row_count=len(rows), ok=results[table].ok)
    return results
