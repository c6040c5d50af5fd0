"""Public SDK surface for the ChefORG store.

This module provides a stable import path for data-access modules.
It re-exports the store client, envelopes and substrate backends.
"""

from __future__ import annotations

from core.config import CheforgConfig
from core.types import ErrorInfo, ErrorKind, QuerySpec, ResultEnvelope
from store.collection_store import CollectionStore
from store.kv_backend import FileKeyValueBackend, MemoryKeyValueBackend
from store.query_builder import QueryBuilder
from store.query_executor import run_query
from store.seed_data import read_seed_file, seed_tables
from store.store_client import StoreClient

__all__ = [
    "CheforgConfig",
    "CollectionStore",
    "ErrorInfo",
    "ErrorKind",
    "FileKeyValueBackend",
    "MemoryKeyValueBackend",
    "QueryBuilder",
    "QuerySpec",
    "ResultEnvelope",
    "StoreClient",
    "read_seed_file",
    "run_query",
    "seed_tables",
]
