"""Tests for indexer configuration."""

import pytest
from pydantic import ValidationError

from indexer.config import Environment, Settings, get_settings


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "DATABASE_URL": "sqlite://",
        "INDEXER_ENV": "test",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class TestSettingsDefaults:
    def test_defaults(self):
        s = _make_settings()
        assert s.indexer_env == Environment.TEST
        assert s.chain_id == 0
        assert s.log_json is True
        assert s.log_level == "INFO"
        assert s.is_production_like is False

    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError, match="DATABASE_URL"):
            Settings(_env_file=None)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://localhost/indexer")
        monkeypatch.setenv("INDEXER_CHAIN_ID", "1017")
        monkeypatch.setenv("LOG_JSON", "false")

        s = get_settings()

        assert s.database_url == "postgresql+psycopg://localhost/indexer"
        assert s.chain_id == 1017
        assert s.log_json is False


class TestSettingsValidation:
    def test_log_level_normalized(self):
        assert _make_settings(LOG_LEVEL=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError, match="LOG_LEVEL"):
            _make_settings(LOG_LEVEL="chatty")

    def test_negative_chain_id_rejected(self):
        with pytest.raises(ValidationError):
            _make_settings(INDEXER_CHAIN_ID=-1)

    @pytest.mark.parametrize("env", ["staging", "prod"])
    def test_sqlite_rejected_outside_local(self, env):
        with pytest.raises(ValidationError, match="must not be SQLite"):
            _make_settings(INDEXER_ENV=env, DATABASE_URL="sqlite:///indexer.db")

    @pytest.mark.parametrize("env", ["staging", "prod"])
    def test_postgres_accepted_outside_local(self, env):
        s = _make_settings(INDEXER_ENV=env, DATABASE_URL="postgresql+psycopg://db/indexer")
        assert s.is_production_like is True

    def test_sqlite_accepted_locally(self):
        s = _make_settings(INDEXER_ENV="local", DATABASE_URL="sqlite:///indexer.db")
        assert s.indexer_env == Environment.LOCAL
