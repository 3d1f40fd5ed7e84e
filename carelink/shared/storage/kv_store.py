"""Key-value store contract and backends.

The message analysis engine persists its knowledge catalog as one JSON
document under a single key; the surrounding application stores message
records the same way. Values are JSON-compatible Python objects.
"""
import copy
import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .connection import ConnectionManager, DatabaseConfig

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for storage errors."""
    pass


class StorageUnavailableError(StorageError):
    """The store could not be read from or written to."""
    pass


class KeyValueStore(ABC):
    """get/set over JSON documents."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent.

        Raises:
            StorageUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under key.

        Raises:
            StorageUnavailableError: If the store cannot be reached
        """
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store for development and tests.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._data:
                return None
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        # Reject values that would not survive a real backend
        json.dumps(value)
        with self._lock:
            self._data[key] = copy.deepcopy(value)


class PostgresKeyValueStore(KeyValueStore):
    """Key-value documents in a PostgreSQL JSONB table.

    Expected schema:
        CREATE TABLE kv_store (
            key TEXT PRIMARY KEY,
            value JSONB NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        table_name: str = "kv_store",
    ):
        self.connection_manager = connection_manager
        self.table_name = table_name

        logger.info(
            "KV_STORE_INITIALIZED",
            extra={"backend": "postgres", "table_name": table_name}
        )

    def get(self, key: str) -> Optional[Any]:
        try:
            with self.connection_manager.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"SELECT value FROM {self.table_name} WHERE key = %s",
                        (key,)
                    )
                    row = cur.fetchone()
        except Exception as e:
            logger.error(
                "KV_STORE_READ_FAILED",
                extra={"key": key, "error": str(e), "error_type": type(e).__name__}
            )
            raise StorageUnavailableError(f"Failed to read key {key!r}: {e}") from e

        if row is None:
            return None
        value = row[0]
        # psycopg2 decodes JSONB itself; plain JSON/TEXT columns come back as str
        if isinstance(value, str):
            return json.loads(value)
        return value

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        query = f"""
            INSERT INTO {self.table_name} (key, value, updated_at)
            VALUES (%s, %s::jsonb, now())
            ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = now()
        """
        try:
            with self.connection_manager.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (key, payload))
                conn.commit()
        except Exception as e:
            logger.error(
                "KV_STORE_WRITE_FAILED",
                extra={"key": key, "error": str(e), "error_type": type(e).__name__}
            )
            raise StorageUnavailableError(f"Failed to write key {key!r}: {e}") from e

        logger.debug("KV_STORE_WRITE", extra={"key": key, "bytes": len(payload)})


def build_store(backend: str) -> KeyValueStore:
    """Create the key-value store for a backend name.

    "postgres" reads its connection settings from the environment
    (DatabaseConfig.from_env).

    Raises:
        ValueError: If the backend name is unknown
    """
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "postgres":
        return PostgresKeyValueStore(ConnectionManager(DatabaseConfig.from_env()))
    raise ValueError(f"Unknown store backend: {backend}")
