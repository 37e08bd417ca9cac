"""Tests for application config loading (F1)."""

import pytest

from proacademics.config.app_config import (
    CONFIG_ENV,
    DB_PATH_ENV,
    clear_config_cache,
    load_app_config,
)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    monkeypatch.delenv(DB_PATH_ENV, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


class TestLoadAppConfig:
    """Tests for load_app_config."""

    def test_defaults_when_file_missing(self, tmp_path, monkeypatch):
        """Missing YAML falls back to built-in defaults."""
        monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "nope.yaml"))

        config = load_app_config()

        assert config.database.path == "db/proacademics.db"
        assert config.pagination.default_limit == 10
        assert config.pagination.max_limit == 100
        assert config.api.cors_origins == ["*"]
        assert config.api.max_upload_bytes == 5 * 1024 * 1024

    def test_yaml_overrides_defaults(self, tmp_path, monkeypatch):
        """Values in the YAML file win; missing keys keep defaults."""
        config_file = tmp_path / "admin.yaml"
        config_file.write_text(
            "database:\n  path: other/admin.db\npagination:\n  default_limit: 25\n"
        )
        monkeypatch.setenv(CONFIG_ENV, str(config_file))

        config = load_app_config()

        assert config.database.path == "other/admin.db"
        assert config.pagination.default_limit == 25
        assert config.pagination.max_limit == 100
        assert config.api.title == "ProAcademics Admin API"

    def test_default_limit_capped_by_max(self, tmp_path, monkeypatch):
        config_file = tmp_path / "admin.yaml"
        config_file.write_text("pagination:\n  default_limit: 500\n  max_limit: 50\n")
        monkeypatch.setenv(CONFIG_ENV, str(config_file))

        assert load_app_config().pagination.default_limit == 50

    def test_upload_limit_from_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "admin.yaml"
        config_file.write_text("api:\n  max_upload_bytes: 1024\n")
        monkeypatch.setenv(CONFIG_ENV, str(config_file))

        config = load_app_config()

        assert config.api.max_upload_bytes == 1024
        assert config.api.title == "ProAcademics Admin API"

    def test_db_path_env_override(self, tmp_path, monkeypatch):
        """PROACADEMICS_DB_PATH beats the config file."""
        monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "nope.yaml"))
        monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "env.db"))

        assert load_app_config().database.path == str(tmp_path / "env.db")

    def test_config_is_cached(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "nope.yaml"))

        first = load_app_config()
        assert load_app_config() is first
        assert load_app_config(force_reload=True) is not first
