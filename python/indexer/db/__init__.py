"""Database module for the indexer.

Provides engine creation, session management, transaction helpers, ORM models
and the partial merge store.
"""

from indexer.db.engine import create_db_engine, get_engine
from indexer.db.models import Base, Bucket, BucketStatus, MirrorStatus, Object, ObjectStatus
from indexer.db.session import get_db, transaction
from indexer.db.store import MergeStore

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "get_db",
    "transaction",
    # Base
    "Base",
    # Enums
    "BucketStatus",
    "ObjectStatus",
    "MirrorStatus",
    # Models
    "Bucket",
    "Object",
    # Store
    "MergeStore",
]
