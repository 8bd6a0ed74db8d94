"""Fixtures for F5 tests - CLI and configuration."""

from pathlib import Path

import pytest

from eyelevel.config.app_config import clear_config_cache
from eyelevel.core.records import RecordStore, StudentRegistry
from eyelevel.db.kv_store import SqliteKeyValueStore


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """Every test starts from an empty config cache and no PORT override."""
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("EYELEVEL_DB_PATH", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "db" / "eyelevel.db"


@pytest.fixture
def cli_env(db_path) -> dict[str, str]:
    """Environment pointing the CLI at a temporary database."""
    return {"EYELEVEL_DB_PATH": str(db_path)}


@pytest.fixture
def store(db_path) -> RecordStore:
    """Record store over the same database the CLI uses."""
    return RecordStore(SqliteKeyValueStore(db_path))


@pytest.fixture
def registry(db_path) -> StudentRegistry:
    return StudentRegistry(SqliteKeyValueStore(db_path))
