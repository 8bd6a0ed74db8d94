"""Durable key/value persistence.

Provides:
- KeyValueStore protocol (get/set by string key)
- SqliteKeyValueStore: SQLite-backed store used by the CLI and Web API
- MemoryKeyValueStore: process-local store for tests and dry runs

Values are opaque strings (JSON documents written by the record store).
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Protocol

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/eyelevel.db")


class StorageUnavailableError(Exception):
    """Raised when the persistence layer cannot be read or written."""

    def __init__(self, operation: str, key: str, reason: str = ""):
        self.operation = operation
        self.key = key
        self.reason = reason
        super().__init__(f"Storage {operation} failed for key '{key}'")


class KeyValueStore(Protocol):
    """Minimal durable key/value contract."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class SqliteKeyValueStore:
    """Key/value store backed by a single SQLite table.

    Each `set` runs in its own transaction, so a whole value is either
    written or not written at all.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or DEFAULT_DB_PATH

    def init_db(self) -> None:
        """Create the database file and schema if they don't exist."""
        with self._connect() as conn:
            _create_schema(conn)

        logger.info("kv_store.initialized", path=str(self.db_path))

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager.

        Commits on success, rolls back and re-raises on error.
        """
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, key: str) -> str | None:
        try:
            with self._connect() as conn:
                _create_schema(conn)
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except (sqlite3.Error, OSError) as e:
            logger.error("kv_store.read_failed", key=key, error=str(e))
            raise StorageUnavailableError("read", key, str(e)) from e

        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._connect() as conn:
                _create_schema(conn)
                conn.execute(
                    "INSERT INTO kv_store (key, value, updated_at) "
                    "VALUES (?, ?, datetime('now')) "
                    "ON CONFLICT(key) DO UPDATE SET "
                    "value = excluded.value, updated_at = excluded.updated_at",
                    (key, value),
                )
        except (sqlite3.Error, OSError) as e:
            logger.error("kv_store.write_failed", key=key, error=str(e))
            raise StorageUnavailableError("write", key, str(e)) from e

        logger.debug("kv_store.written", key=key, size=len(value))


class MemoryKeyValueStore:
    """In-memory key/value store (not durable)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );
        """
    )
