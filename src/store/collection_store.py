"""Collection store over a key-value substrate.

This module maps table names onto persisted JSON arrays of records.
Reads always answer: missing or malformed entries degrade to an empty
table. Writes log failures and raise a typed error for the gateway.
"""

from __future__ import annotations

import json
from typing import Any

from core.config import CheforgConfig
from core.constants import DEFAULT_KEY_PREFIX
from core.errors import CheforgStoreError, CheforgStoreWriteError
from core.logging_config import get_logger
from core.types import Record
from store.kv_backend import FileKeyValueBackend, KeyValueBackend

_LOGGER = get_logger(__name__)


class CollectionStore:
    """Durable mapping of table name to an ordered list of records.

    Every call reads from or writes through to the substrate, so two
    reads of the same table return independent snapshots.
    """

    def __init__(self, backend: KeyValueBackend, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        """Create a collection store.

        Args:
            backend: Text substrate holding one entry per table.
            key_prefix: Prefix joined with table names to form storage keys.
        """
        self._backend = backend
        self._key_prefix = key_prefix

    @classmethod
    def from_config(cls, config: CheforgConfig) -> "CollectionStore":
        """Build a file-backed store rooted at ``config.data_root``."""
        return cls(FileKeyValueBackend(config.data_root), key_prefix=config.key_prefix)

    def get(self, table: str) -> list[Record]:
        """Return a fresh snapshot of a table.

        Args:
            table: Table name.

        Returns:
            Stored records in insertion order, or an empty list when the
            entry is absent, unreadable, or not a JSON array.
        """
        key = self.storage_key(table)
        try:
            raw_value = self._backend.get_item(key)
            if raw_value is None:
                return []
            payload = json.loads(raw_value)
        except Exception as error:
            _LOGGER.warning("collection_read_failed", table=table, key=key, error=str(error))
            return []
        if not isinstance(payload, list):
            _LOGGER.warning(
                "collection_read_failed",
                table=table,
                key=key,
                error=f"expected JSON array, got {type(payload).__name__}",
            )
            return []
        return payload

    def set(self, table: str, records: list[Record]) -> None:
        """Serialize and persist a whole table.

        Args:
            table: Table name.
            records: Complete table contents.

        Raises:
            CheforgStoreWriteError: If serialization or the substrate write fails.
        """
        key = self.storage_key(table)
        try:
            self._backend.set_item(key, json.dumps(records, ensure_ascii=False))
        except (TypeError, ValueError, OSError, CheforgStoreError) as error:
            _LOGGER.error("collection_write_failed", table=table, key=key, error=str(error))
            raise CheforgStoreWriteError(
                f"Failed to persist table '{table}' under key '{key}': {error}."
            ) from error

    def tables(self) -> list[str]:
        """Return names of tables that currently have a persisted entry."""
        prefix_length = len(self._key_prefix)
        return [
            key[prefix_length:]
            for key in self._backend.keys()
            if key.startswith(self._key_prefix)
        ]

    def get_document(self, name: str) -> dict[str, Any] | None:
        """Return a single JSON object entry, or ``None`` if absent or malformed."""
        key = self.storage_key(name)
        try:
            raw_value = self._backend.get_item(key)
            payload = json.loads(raw_value) if raw_value is not None else None
        except Exception as error:
            _LOGGER.warning("document_read_failed", name=name, key=key, error=str(error))
            return None
        return payload if isinstance(payload, dict) else None

    def set_document(self, name: str, payload: dict[str, Any]) -> None:
        """Persist a single JSON object entry.

        Raises:
            CheforgStoreWriteError: If serialization or the substrate write fails.
        """
        key = self.storage_key(name)
        try:
            self._backend.set_item(key, json.dumps(payload, ensure_ascii=False))
        except (TypeError, ValueError, OSError, CheforgStoreError) as error:
            _LOGGER.error("document_write_failed", name=name, key=key, error=str(error))
            raise CheforgStoreWriteError(
                f"Failed to persist entry '{name}' under key '{key}': {error}."
            ) from error

    def remove(self, name: str) -> None:
        """Delete a table or document entry if present."""
        self._backend.remove_item(self.storage_key(name))

    def storage_key(self, name: str) -> str:
        return f"{self._key_prefix}{name}"
