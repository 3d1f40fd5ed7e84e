"""Persistence for carelink services.

A JSON key-value store contract with an in-memory backend for development
and a PostgreSQL backend for deployment.
"""

from .connection import DatabaseConfig, ConnectionManager
from .kv_store import (
    build_store,
    KeyValueStore,
    InMemoryKeyValueStore,
    PostgresKeyValueStore,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    "build_store",
    "DatabaseConfig",
    "ConnectionManager",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "PostgresKeyValueStore",
    "StorageError",
    "StorageUnavailableError",
]
