"""Pytest configuration and fixtures for indexer tests.

Test isolation strategy:
- Every test gets its own in-memory SQLite database with the ORM schema
  created from metadata (TEST_DATABASE_URL overrides the URL)
- db_session is a plain session on that database; tests may commit freely
- store wraps db_session in a MergeStore
- recording_store additionally keeps every patch it merges
"""

import os
from collections.abc import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from indexer.config import clear_settings_cache
from indexer.db.engine import create_db_engine
from indexer.db.models import Base
from indexer.db.session import create_session_factory
from indexer.db.store import MergeStore
from indexer.logging import clear_event_context
from tests.factories import RecordingStore


def get_test_database_url() -> str:
    """Get the test database URL, defaulting to in-memory SQLite."""
    return os.environ.get("TEST_DATABASE_URL", "sqlite://")


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create a fresh database with the entity schema for one test."""
    engine = create_db_engine(get_test_database_url())
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a database session bound to the per-test database."""
    session_factory = create_session_factory(engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session: Session) -> MergeStore:
    """Provide a merge store over the test session."""
    return MergeStore(db_session)


@pytest.fixture
def recording_store(db_session: Session) -> RecordingStore:
    """Provide a merge store that remembers every merged patch."""
    return RecordingStore(db_session)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_event_context():
    """Make sure no event logging context leaks between tests."""
    yield
    clear_event_context()
