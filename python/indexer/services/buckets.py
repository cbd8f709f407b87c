"""Bucket projector.

One handler per bucket event type. Each handler turns the event payload and
its ledger context into either a full Bucket record (creation) or a
BucketPatch, and hands it to the merge store.

Per-event field rules:
- CreateBucket: full record, removed=False
- DeleteBucket: removed=True only
- UpdateBucketInfo: quota, payment address, visibility, VGF id; status untouched
- DiscontinueBucket: status DISCONTINUED, delete reason/time
- MigrationBucket: status MIGRATING, start time + destination SP;
  clears completion time and reject reason
- CompleteMigrationBucket: status CREATED, completion time + VGF id;
  clears start time, destination SP and reject reason
- CancelMigrationBucket: status CREATED; clears all migration fields
- RejectMigrateBucket: status CREATED, reject reason;
  clears start time, destination SP and completion time

Every patch stamps update_at/update_tx_hash/update_time from the context.
"""

from indexer.db.models import Bucket, BucketStatus
from indexer.db.store import MergeStore
from indexer.ledger import LedgerContext, big_to_hash
from indexer.logging import get_logger
from indexer.schemas.events import (
    EventCancelMigrationBucket,
    EventCompleteMigrationBucket,
    EventCreateBucket,
    EventDeleteBucket,
    EventDiscontinueBucket,
    EventMigrationBucket,
    EventRejectMigrateBucket,
    EventUpdateBucketInfo,
)
from indexer.schemas.patches import BucketPatch

logger = get_logger(__name__)

MIGRATION_REJECTED_REASON = "Migration rejected"


def _audit(ctx: LedgerContext) -> dict:
    return {
        "update_at": ctx.block_height,
        "update_tx_hash": ctx.tx_hash,
        "update_time": ctx.block_timestamp,
    }


def handle_create_bucket(store: MergeStore, ctx: LedgerContext, event: EventCreateBucket) -> None:
    bucket = Bucket(
        bucket_id=big_to_hash(event.bucket_id),
        bucket_name=event.bucket_name,
        owner=event.owner,
        payment_address=event.payment_address,
        global_virtual_group_family_id=event.global_virtual_group_family_id,
        operator=event.owner,
        source_type=event.source_type,
        charged_read_quota=event.charged_read_quota,
        visibility=event.visibility,
        status=event.status,
        removed=False,
        create_at=ctx.block_height,
        create_tx_hash=ctx.tx_hash,
        create_time=event.create_at,
        **_audit(ctx),
    )
    store.create(bucket)
    logger.info("bucket_created", bucket_id=bucket.bucket_id, bucket_name=bucket.bucket_name)


def handle_delete_bucket(store: MergeStore, ctx: LedgerContext, event: EventDeleteBucket) -> None:
    patch = BucketPatch(removed=True, **_audit(ctx))
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)


def handle_update_bucket_info(
    store: MergeStore, ctx: LedgerContext, event: EventUpdateBucketInfo
) -> None:
    # Status and migration fields are deliberately absent from this patch
    patch = BucketPatch(
        charged_read_quota=event.charged_read_quota,
        payment_address=event.payment_address,
        visibility=event.visibility,
        global_virtual_group_family_id=event.global_virtual_group_family_id,
        **_audit(ctx),
    )
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)


def handle_discontinue_bucket(
    store: MergeStore, ctx: LedgerContext, event: EventDiscontinueBucket
) -> None:
    patch = BucketPatch(
        status=BucketStatus.DISCONTINUED.value,
        delete_reason=event.reason,
        delete_at=event.delete_at,
        **_audit(ctx),
    )
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)


def handle_migration_bucket(
    store: MergeStore, ctx: LedgerContext, event: EventMigrationBucket
) -> None:
    patch = BucketPatch(
        status=BucketStatus.MIGRATING.value,
        migration_start_time=ctx.block_timestamp,
        dest_primary_sp_id=str(event.dst_primary_sp_id),
        migration_complete_time=None,
        migration_reject_reason="",
        **_audit(ctx),
    )
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)
    logger.info(
        "bucket_migration_started",
        bucket_name=event.bucket_name,
        dest_primary_sp_id=event.dst_primary_sp_id,
    )


def handle_complete_migration_bucket(
    store: MergeStore, ctx: LedgerContext, event: EventCompleteMigrationBucket
) -> None:
    patch = BucketPatch(
        status=BucketStatus.CREATED.value,
        global_virtual_group_family_id=event.global_virtual_group_family_id,
        migration_complete_time=ctx.block_timestamp,
        migration_start_time=None,
        dest_primary_sp_id="",
        migration_reject_reason="",
        **_audit(ctx),
    )
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)
    logger.info("bucket_migration_completed", bucket_name=event.bucket_name)


def handle_cancel_migration_bucket(
    store: MergeStore, ctx: LedgerContext, event: EventCancelMigrationBucket
) -> None:
    patch = BucketPatch(
        status=BucketStatus.CREATED.value,
        migration_start_time=None,
        dest_primary_sp_id="",
        migration_complete_time=None,
        migration_reject_reason="",
        **_audit(ctx),
    )
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)
    logger.info("bucket_migration_cancelled", bucket_name=event.bucket_name)


def handle_reject_migrate_bucket(
    store: MergeStore, ctx: LedgerContext, event: EventRejectMigrateBucket
) -> None:
    patch = BucketPatch(
        status=BucketStatus.CREATED.value,
        migration_reject_reason=MIGRATION_REJECTED_REASON,
        migration_start_time=None,
        dest_primary_sp_id="",
        migration_complete_time=None,
        **_audit(ctx),
    )
    store.merge(Bucket, big_to_hash(event.bucket_id), patch)
    logger.info("bucket_migration_rejected", bucket_name=event.bucket_name)
