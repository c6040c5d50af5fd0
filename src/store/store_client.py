"""Client surface for table access.

This module exposes the per-table verb set used by data-access modules:
``select`` builds a query, ``insert``/``update``/``delete`` run through
the mutation gateway. The collection store is injected, never global.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from core.config import CheforgConfig
from core.types import Record, ResultEnvelope
from store.auth_session import AuthSession
from store.collection_store import CollectionStore
from store.mutation_gateway import MutationGateway
from store.query_builder import QueryBuilder
from store.record_identity import Clock, utc_now


class StoreClient:
    """Primary entry point for table reads, writes and auth sessions."""

    def __init__(
        self,
        store: CollectionStore | None = None,
        config: CheforgConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Create a store client.

        Args:
            store: Collection store to use; file-backed from config when omitted.
            config: Optional runtime configuration.
            clock: Source of the current time for ids and timestamps.
        """
        self._config = config or CheforgConfig.from_env()
        self._store = store or CollectionStore.from_config(self._config)
        self._gateway = MutationGateway(self._store, clock=clock)
        self.auth = AuthSession(self._store, self._config.dev_password, clock=clock)

    @property
    def store(self) -> CollectionStore:
        return self._store

    def from_(self, table: str) -> "TableHandle":
        """Get a handle for one table.

        Args:
            table: Table name.

        Returns:
            Table handle.
        """
        return TableHandle(table, self._store, self._gateway)

    def tables(self) -> list[str]:
        """List persisted entry names."""
        return self._store.tables()


class TableHandle:
    """Verb set for one table."""

    def __init__(self, table: str, store: CollectionStore, gateway: MutationGateway) -> None:
        self._table = table
        self._store = store
        self._gateway = gateway

    @property
    def name(self) -> str:
        return self._table

    def select(self) -> QueryBuilder:
        """Start a query; await the returned builder to run it."""
        return QueryBuilder(self._store, self._table)

    async def insert(self, values: Record | Sequence[Record]) -> ResultEnvelope[list[Record]]:
        """Insert one record or a list of records."""
        return self._gateway.insert(self._table, values)

    def update(self, patch: Mapping[str, Any]) -> "UpdateRequest":
        """Prepare an update; finish with ``.eq`` or ``.match``."""
        return UpdateRequest(self._table, patch, self._gateway)

    def delete(self) -> "DeleteRequest":
        """Prepare a delete; finish with ``.eq`` or ``.match``."""
        return DeleteRequest(self._table, self._gateway)


class UpdateRequest:
    """Pending update awaiting its row match."""

    def __init__(self, table: str, patch: Mapping[str, Any], gateway: MutationGateway) -> None:
        self._table = table
        self._patch = patch
        self._gateway = gateway

    async def eq(self, field: str, value: Any) -> ResultEnvelope[list[Record]]:
        return self._gateway.update(self._table, self._patch, field, value)

    async def match(self, filters: Mapping[str, Any]) -> ResultEnvelope[list[Record]]:
        return self._gateway.update_with_match(self._table, self._patch, filters)


class DeleteRequest:
    """Pending delete awaiting its row match."""

    def __init__(self, table: str, gateway: MutationGateway) -> None:
        self._table = table
        self._gateway = gateway

    async def eq(self, field: str, value: Any) -> ResultEnvelope[None]:
        return self._gateway.delete(self._table, field, value)

    async def match(self, filters: Mapping[str, Any]) -> ResultEnvelope[None]:
        return self._gateway.delete_with_match(self._table, filters)
