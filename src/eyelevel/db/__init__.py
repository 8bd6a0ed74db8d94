"""Persistence module.

Provides the durable key/value store used by the record store:
- SqliteKeyValueStore for real use
- MemoryKeyValueStore for tests
"""

from eyelevel.db.kv_store import (
    DEFAULT_DB_PATH,
    KeyValueStore,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
    StorageUnavailableError,
)

__all__ = [
    "DEFAULT_DB_PATH",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "StorageUnavailableError",
]
