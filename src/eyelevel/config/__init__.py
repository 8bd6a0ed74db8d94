"""Configuration package for EyeLevel tracker."""

from eyelevel.config.app_config import (
    AppConfig,
    OcrConfig,
    ServerConfig,
    StorageConfig,
    clear_config_cache,
    load_app_config,
    storage_db_path,
)

__all__ = [
    "AppConfig",
    "OcrConfig",
    "ServerConfig",
    "StorageConfig",
    "clear_config_cache",
    "load_app_config",
    "storage_db_path",
]
