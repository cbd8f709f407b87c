"""SQLAlchemy ORM models for the storage indexer.

Defines the bucket and object entity tables using SQLAlchemy 2.x declarative
patterns. Enumerated ledger values are stored as their enum names in plain
text columns so the store never has to track the ledger's enum evolution.

Every non-key column is nullable: entities are only ever written through
full creation or field patches, and a patch must be able to leave any column
untouched.
"""

from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Enums
# =============================================================================


class BucketStatus(str, PyEnum):
    """Bucket lifecycle states as named by the ledger.

    States:
        BUCKET_STATUS_CREATED: Active bucket
        BUCKET_STATUS_DISCONTINUED: Scheduled for deletion by the storage provider
        BUCKET_STATUS_MIGRATING: Moving to a new primary storage provider
    """

    CREATED = "BUCKET_STATUS_CREATED"
    DISCONTINUED = "BUCKET_STATUS_DISCONTINUED"
    MIGRATING = "BUCKET_STATUS_MIGRATING"


class ObjectStatus(str, PyEnum):
    """Object lifecycle states as named by the ledger.

    States:
        OBJECT_STATUS_CREATED: Created, payload not yet sealed
        OBJECT_STATUS_SEALED: Payload sealed by the primary storage provider
        OBJECT_STATUS_DISCONTINUED: Scheduled for deletion by the storage provider
    """

    CREATED = "OBJECT_STATUS_CREATED"
    SEALED = "OBJECT_STATUS_SEALED"
    DISCONTINUED = "OBJECT_STATUS_DISCONTINUED"


class MirrorStatus(str, PyEnum):
    """Cross-chain mirror progress of an object.

    The empty string means the object was never mirrored.
    """

    NONE = ""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


# =============================================================================
# Models
# =============================================================================


class Bucket(Base):
    """Bucket entity - materialized view of one ledger bucket.

    Migration sub-state: at most one of migration_start_time (in progress),
    migration_complete_time (completed) or migration_reject_reason (rejected)
    is populated at a time.
    """

    __tablename__ = "buckets"

    bucket_id: Mapped[str] = mapped_column(String(66), primary_key=True)
    bucket_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    owner: Mapped[str | None] = mapped_column(String(42), nullable=True)
    payment_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    operator: Mapped[str | None] = mapped_column(String(42), nullable=True)
    global_virtual_group_family_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    charged_read_quota: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    visibility: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_type: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str | None] = mapped_column(Text, nullable=True)
    removed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    delete_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    delete_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    # Migration sub-state
    migration_start_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    dest_primary_sp_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    migration_complete_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    migration_reject_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Audit
    create_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    create_tx_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    create_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    update_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    update_tx_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    update_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        Index("idx_buckets_bucket_name", "bucket_name"),
        Index("idx_buckets_owner", "owner"),
    )

    def __repr__(self) -> str:
        return f"<Bucket {self.bucket_id} {self.bucket_name!r} status={self.status}>"


class Object(Base):
    """Object entity - materialized view of one ledger object.

    Content-update sub-state: is_updating is true between a content update
    start (nonzero payload) and its matching success/cancel event.
    """

    __tablename__ = "objects"

    object_id: Mapped[str] = mapped_column(String(66), primary_key=True)
    object_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    bucket_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    bucket_id: Mapped[str | None] = mapped_column(String(66), nullable=True)

    # Content
    payload_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    checksums: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    content_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    redundancy_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_type: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ownership
    creator: Mapped[str | None] = mapped_column(String(42), nullable=True)
    owner: Mapped[str | None] = mapped_column(String(42), nullable=True)
    operator: Mapped[str | None] = mapped_column(String(42), nullable=True)
    updater: Mapped[str | None] = mapped_column(String(42), nullable=True)

    # Lifecycle
    status: Mapped[str | None] = mapped_column(Text, nullable=True)
    removed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    local_virtual_group_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sealed_tx_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    delete_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    delete_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    # Content-update sub-state
    is_updating: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    content_updated_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    # Mirror sub-state
    mirror_status: Mapped[str | None] = mapped_column(Text, nullable=True)
    mirror_fail_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    dest_chain_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_chain_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Audit
    create_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    create_tx_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    create_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    update_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    update_tx_hash: Mapped[str | None] = mapped_column(String(66), nullable=True)
    update_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        Index("idx_objects_bucket_name_object_name", "bucket_name", "object_name"),
        Index("idx_objects_owner", "owner"),
    )

    def __repr__(self) -> str:
        return f"<Object {self.object_id} {self.bucket_name}/{self.object_name} status={self.status}>"


def entity_key(entity: Any) -> str:
    """Return the immutable identifier of a bucket or object entity."""
    if isinstance(entity, Bucket):
        return entity.bucket_id
    if isinstance(entity, Object):
        return entity.object_id
    raise TypeError(f"not an entity: {type(entity).__name__}")
