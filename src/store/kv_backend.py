"""Key-value substrates for table persistence.

This module provides the flat ``key -> text`` mapping every table is
stored in. The file backend keeps one JSON document per key under the
data root; the memory backend serves tests and embedded callers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from core.constants import STORAGE_FILE_SUFFIX
from core.errors import CheforgStoreError


class KeyValueBackend(Protocol):
    """Minimal text storage contract consumed by the collection store."""

    def get_item(self, key: str) -> str | None:
        """Return stored text for ``key`` or ``None`` when absent."""

    def set_item(self, key: str, value: str) -> None:
        """Persist ``value`` under ``key``, replacing prior content."""

    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""

    def keys(self) -> list[str]:
        """Return all stored keys."""


class FileKeyValueBackend:
    """Filesystem-backed substrate with one file per key."""

    def __init__(self, root: Path) -> None:
        """Initialize the backend and ensure its directory exists.

        Args:
            root: Directory holding the key files.
        """
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        """Return the directory holding the key files."""
        return self._root

    def get_item(self, key: str) -> str | None:
        """Read the text stored under a key.

        Args:
            key: Storage key.

        Returns:
            File contents, or ``None`` when no file exists for the key.
        """
        path = self._key_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        """Write text under a key, replacing any previous file.

        Args:
            key: Storage key.
            value: Serialized document.
        """
        self._key_path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        """Delete the file for a key if it exists.

        Args:
            key: Storage key.
        """
        path = self._key_path(key)
        if path.exists():
            path.unlink()

    def keys(self) -> list[str]:
        """List stored keys.

        Returns:
            Sorted key names derived from the document file names.
        """
        return sorted(path.stem for path in self._root.glob(f"*{STORAGE_FILE_SUFFIX}"))

    def _key_path(self, key: str) -> Path:
        """Resolve the file path for a key.

        Raises:
            CheforgStoreError: If the key would escape the data root.
        """
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise CheforgStoreError(
                f"Invalid storage key '{key}': keys must be plain file-safe names."
            )
        return self._root / f"{key}{STORAGE_FILE_SUFFIX}"


class MemoryKeyValueBackend:
    """Process-local substrate backed by a dictionary."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Initialize the backend.

        Args:
            initial: Optional starting ``key -> text`` items, copied.
        """
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        """Return the text for a key, or ``None`` when absent."""
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store text under a key."""
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        """Drop a key if present."""
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        """Return stored keys in sorted order."""
        return sorted(self._items)
