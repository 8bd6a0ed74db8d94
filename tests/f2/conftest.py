"""Fixtures for F2 tests - Record Store."""

import pytest

from eyelevel.core.records import Category, ProgressEntry, RecordStore, StudentRegistry
from eyelevel.db.kv_store import (
    MemoryKeyValueStore,
    SqliteKeyValueStore,
    StorageUnavailableError,
)


class FailingKeyValueStore(MemoryKeyValueStore):
    """Memory store whose writes (and optionally reads) fail."""

    def __init__(self, initial=None, fail_reads=False):
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.write_attempts = 0

    def get(self, key):
        if self.fail_reads:
            raise StorageUnavailableError("read", key, "disk unavailable")
        return super().get(key)

    def set(self, key, value):
        self.write_attempts += 1
        raise StorageUnavailableError("write", key, "disk full")


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    """Empty in-memory key/value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv) -> RecordStore:
    return RecordStore(kv)


@pytest.fixture
def registry(kv) -> StudentRegistry:
    return StudentRegistry(kv)


@pytest.fixture
def sqlite_kv(tmp_path) -> SqliteKeyValueStore:
    """SQLite store in a temporary directory."""
    return SqliteKeyValueStore(tmp_path / "db" / "eyelevel.db")


@pytest.fixture
def make_entry():
    """Factory for entries with sensible defaults."""

    def _make(entry_id: str, value: int = 3, category: Category = Category.BTM) -> ProgressEntry:
        return ProgressEntry(
            id=entry_id,
            value=value,
            label="LB-B12",
            date="3/14/2025",
            category=category,
        )

    return _make


@pytest.fixture
def failing_kv() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture
def unreadable_kv() -> FailingKeyValueStore:
    return FailingKeyValueStore(fail_reads=True)
