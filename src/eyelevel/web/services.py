"""Shared service instances for the Web API.

Routes obtain the record store, student registry and OCR client through
the getters below. Tests swap them with `configure_services()`.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from eyelevel.config.app_config import storage_db_path
from eyelevel.core.records import RecordStore, StudentRegistry
from eyelevel.db.kv_store import KeyValueStore, SqliteKeyValueStore
from eyelevel.ocr.client import OcrClient

logger = structlog.get_logger(__name__)


@dataclass
class Services:
    """Services bound to one key/value store."""

    store: RecordStore
    registry: StudentRegistry
    ocr_client: OcrClient | None = None


_services: Services | None = None


def configure_services(
    kv_store: KeyValueStore | None = None,
    ocr_client: OcrClient | None = None,
) -> Services:
    """Bind services to a key/value store (SQLite from config by default)."""
    global _services

    if kv_store is None:
        db_path = storage_db_path()
        kv_store = SqliteKeyValueStore(db_path)
        logger.info("services_using_sqlite", db_path=str(db_path))

    _services = Services(
        store=RecordStore(kv_store),
        registry=StudentRegistry(kv_store),
        ocr_client=ocr_client,
    )
    return _services


def get_services() -> Services:
    """Get the global services, configuring defaults on first use."""
    if _services is None:
        return configure_services()
    return _services


def get_record_store() -> RecordStore:
    return get_services().store


def get_student_registry() -> StudentRegistry:
    return get_services().registry


def get_ocr_client() -> OcrClient:
    """Get the OCR client, creating one from app config if needed."""
    services = get_services()
    if services.ocr_client is None:
        services.ocr_client = OcrClient()
    return services.ocr_client


def reset_services() -> None:
    """Reset the global services (for testing)."""
    global _services
    if _services is not None and _services.ocr_client is not None:
        _services.ocr_client.close()
    _services = None
