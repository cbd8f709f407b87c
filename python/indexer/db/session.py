"""Sessions for the entity store.

One event is projected per transaction: hosts open a session with get_db()
and wrap each event in transaction(db) (apply_event does this already).
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from indexer.db.engine import get_engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessionmaker for projector work on the given engine.

    Sessions never autoflush and keep loaded values after commit, so handlers
    see exactly what they flushed and the store's rowcount checks are exact.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def get_db(engine: Engine | None = None) -> Generator[Session, None, None]:
    """Open a session on engine (default: the configured store) and close it after use.

    Usage:
        with get_db() as db:
            apply_raw_event(db, event_type, attributes, ctx)
    """
    db = create_session_factory(engine or get_engine())()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Generator[None, None, None]:
    """Commit db when the block succeeds, roll back and re-raise when it fails."""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise
