"""Pytest configuration and shared store fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.config import CheforgConfig
from store.collection_store import CollectionStore
from store.kv_backend import MemoryKeyValueBackend
from store.store_client import StoreClient


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        moment = self._current
        self._current = moment + timedelta(seconds=1)
        return moment


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def backend() -> MemoryKeyValueBackend:
    return MemoryKeyValueBackend()


@pytest.fixture
def store(backend: MemoryKeyValueBackend) -> CollectionStore:
    return CollectionStore(backend)


@pytest.fixture
def config(tmp_path) -> CheforgConfig:
    return CheforgConfig(data_root=tmp_path)


@pytest.fixture
def client(store: CollectionStore, config: CheforgConfig, clock: TickingClock) -> StoreClient:
    return StoreClient(store=store, config=config, clock=clock)
