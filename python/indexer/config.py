"""Indexer settings loaded from environment variables.

Environment Configuration:
    INDEXER_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string for the entity store (required)
    INDEXER_CHAIN_ID: Chain id of the ledger the events come from (default 0)

Logging Configuration:
    LOG_JSON: Emit JSON logs (default true); false switches to the console renderer
    LOG_LEVEL: Root log level (default INFO)

Note: SQLite is accepted for local/test only. Staging and prod must point
at PostgreSQL.
"""

import logging
from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Indexer configuration.

    Validation rules:
    - DATABASE_URL is always required
    - INDEXER_CHAIN_ID must be >= 0
    - LOG_LEVEL must name a stdlib logging level
    - staging/prod may not use a SQLite DATABASE_URL
    """

    indexer_env: Environment = Field(default=Environment.LOCAL, alias="INDEXER_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Chain the indexed events originate from; stamped on mirror requests
    chain_id: int = Field(default=0, ge=0, alias="INDEXER_CHAIN_ID")

    log_json: bool = Field(default=True, alias="LOG_JSON")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    @model_validator(mode="after")
    def validate_database_for_env(self) -> "Settings":
        """Refuse SQLite outside local/test environments."""
        if self.indexer_env in (Environment.STAGING, Environment.PROD):
            if self.database_url.startswith("sqlite"):
                raise ValueError(
                    f"DATABASE_URL must not be SQLite for INDEXER_ENV={self.indexer_env.value}"
                )
        return self

    @property
    def is_production_like(self) -> bool:
        """Whether this environment is staging or prod."""
        return self.indexer_env in (Environment.STAGING, Environment.PROD)


@lru_cache
def get_settings() -> Settings:
    """Get cached indexer settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
