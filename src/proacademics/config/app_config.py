"""Application configuration loader.

Loads centralized configuration from data/config/admin_config_v1.yaml
with fallback to built-in defaults. Environment variables override
the file:

- PROACADEMICS_CONFIG: alternate YAML path
- PROACADEMICS_DB_PATH: database file

Usage:
    from proacademics.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.path
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
CONFIG_FILE = Path("data/config/admin_config_v1.yaml")

CONFIG_ENV = "PROACADEMICS_CONFIG"
DB_PATH_ENV = "PROACADEMICS_DB_PATH"


@dataclass
class DatabaseConfig:
    """Database location."""

    path: str = "db/proacademics.db"


@dataclass
class PaginationConfig:
    """List endpoint paging defaults."""

    default_limit: int = 10
    max_limit: int = 100


@dataclass
class ApiConfig:
    """Web API settings."""

    title: str = "ProAcademics Admin API"
    version: str = "0.1.0"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    max_upload_bytes: int = 5 * 1024 * 1024


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "db/proacademics.db"},
        "pagination": {"default_limit": 10, "max_limit": 100},
        "api": {
            "title": "ProAcademics Admin API",
            "version": "0.1.0",
            "cors_origins": ["*"],
            "max_upload_bytes": 5 * 1024 * 1024,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    db_data = {**defaults["database"], **(data.get("database") or {})}
    page_data = {**defaults["pagination"], **(data.get("pagination") or {})}
    api_data = {**defaults["api"], **(data.get("api") or {})}

    pagination = PaginationConfig(
        default_limit=int(page_data["default_limit"]),
        max_limit=int(page_data["max_limit"]),
    )
    if pagination.default_limit > pagination.max_limit:
        pagination.default_limit = pagination.max_limit

    return AppConfig(
        database=DatabaseConfig(path=str(db_data["path"])),
        pagination=pagination,
        api=ApiConfig(
            title=api_data["title"],
            version=str(api_data["version"]),
            cors_origins=list(api_data["cors_origins"]),
            max_upload_bytes=int(api_data["max_upload_bytes"]),
        ),
    )


def _config_file() -> Path:
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_file = _config_file()
    if config_file.exists():
        logger.debug("loading_app_config", source=str(config_file))
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    config = _parse_config(data)

    db_override = os.environ.get(DB_PATH_ENV)
    if db_override:
        config.database.path = db_override

    _cached_config = config
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
