"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults.

Usage:
    from eyelevel.config.app_config import load_app_config

    config = load_app_config()
    api_key = config.ocr.get_api_key()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class OcrConfig:
    """Configuration for the remote OCR service."""

    endpoint: str = "https://api.ocr.space/parse/image"
    api_key_env: str = "OCR_KEY"
    engine: str = "2"
    is_table: bool = True
    timeout_seconds: float = 60.0

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        return os.environ.get(self.api_key_env)


@dataclass
class StorageConfig:
    """Configuration for the key/value database."""

    db_path: str = "db/eyelevel.db"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class AppConfig:
    """Application-wide configuration."""

    ocr: OcrConfig = field(default_factory=OcrConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "ocr": {
            "endpoint": "https://api.ocr.space/parse/image",
            "api_key_env": "OCR_KEY",
            "engine": "2",
            "is_table": True,
            "timeout_seconds": 60.0,
        },
        "storage": {
            "db_path": "db/eyelevel.db",
        },
        "server": {
            "host": "0.0.0.0",
            "port": 3000,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    ocr_data = {**defaults["ocr"], **(data.get("ocr") or {})}
    ocr = OcrConfig(
        endpoint=ocr_data["endpoint"],
        api_key_env=ocr_data["api_key_env"],
        engine=str(ocr_data["engine"]),
        is_table=bool(ocr_data["is_table"]),
        timeout_seconds=float(ocr_data["timeout_seconds"]),
    )

    storage_data = {**defaults["storage"], **(data.get("storage") or {})}
    storage = StorageConfig(db_path=storage_data["db_path"])

    server_data = {**defaults["server"], **(data.get("server") or {})}
    port = os.environ.get("PORT") or server_data["port"]
    server = ServerConfig(host=server_data["host"], port=int(port))

    return AppConfig(ocr=ocr, storage=storage, server=server)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def storage_db_path() -> Path:
    """Database path: EYELEVEL_DB_PATH if set, else the configured path."""
    env_path = os.environ.get("EYELEVEL_DB_PATH")
    if env_path:
        return Path(env_path)
    return Path(load_app_config().storage.db_path)


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
