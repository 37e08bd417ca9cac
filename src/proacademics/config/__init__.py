"""Configuration package for the admin API."""

from proacademics.config.app_config import (
    ApiConfig,
    AppConfig,
    DatabaseConfig,
    PaginationConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "ApiConfig",
    "AppConfig",
    "DatabaseConfig",
    "PaginationConfig",
    "clear_config_cache",
    "load_app_config",
]
