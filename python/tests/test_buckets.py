"""Tests for the bucket projector.

Verifies:
- CreateBucket writes the full record
- Info updates leave status and migration bookkeeping untouched
- Migration start/complete/cancel/reject keep at most one migration sub-state
- DeleteBucket soft-deletes without touching anything else
"""

import pytest
from sqlalchemy.orm import Session

from indexer.db.models import BucketStatus
from indexer.db.store import MergeStore
from indexer.errors import AlreadyExistsError, NotFoundError
from indexer.ledger import big_to_hash
from indexer.schemas import events
from indexer.services import buckets
from tests.factories import (
    OPERATOR,
    OWNER,
    PAYMENT,
    block_ts,
    cancel_migration_bucket_event,
    complete_migration_bucket_event,
    create_bucket_event,
    create_test_bucket,
    get_bucket,
    make_ctx,
    migration_bucket_event,
    reject_migrate_bucket_event,
    snapshot,
    update_bucket_info_event,
)

MIGRATION_FIELDS = (
    "migration_start_time",
    "dest_primary_sp_id",
    "migration_complete_time",
    "migration_reject_reason",
)


def populated_migration_states(bucket) -> list[str]:
    """Names of the migration sub-states currently populated."""
    states = []
    if bucket.migration_start_time is not None or bucket.dest_primary_sp_id:
        states.append("in_progress")
    if bucket.migration_complete_time is not None:
        states.append("completed")
    if bucket.migration_reject_reason:
        states.append("rejected")
    return states


class TestCreateBucket:
    def test_writes_full_record(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, bucket_id=1, height=10)

        bucket = get_bucket(db_session, key)
        assert bucket.bucket_id == big_to_hash(1)
        assert bucket.bucket_name == "bucket-1"
        assert bucket.owner == OWNER
        assert bucket.operator == OWNER
        assert bucket.payment_address == PAYMENT
        assert bucket.global_virtual_group_family_id == 7
        assert bucket.charged_read_quota == 1000
        assert bucket.visibility == "VISIBILITY_TYPE_PRIVATE"
        assert bucket.source_type == "SOURCE_TYPE_ORIGIN"
        assert bucket.status == BucketStatus.CREATED.value
        assert bucket.removed is False

    def test_audit_fields_come_from_context_and_event(
        self, db_session: Session, store: MergeStore
    ):
        key = create_test_bucket(store, bucket_id=1, height=10)

        bucket = get_bucket(db_session, key)
        ctx = make_ctx(10)
        assert bucket.create_at == 10
        assert bucket.create_tx_hash == ctx.tx_hash
        assert bucket.create_time == 1_700_000_000
        assert bucket.update_at == 10
        assert bucket.update_tx_hash == ctx.tx_hash
        assert bucket.update_time == block_ts(10)

    def test_duplicate_create_raises_and_keeps_original(
        self, db_session: Session, store: MergeStore
    ):
        key = create_test_bucket(store, bucket_id=1, height=10)

        with pytest.raises(AlreadyExistsError):
            buckets.handle_create_bucket(
                store, make_ctx(11), create_bucket_event(1, bucket_name="other")
            )

        assert get_bucket(db_session, key).bucket_name == "bucket-1"


class TestUpdateBucketInfo:
    def test_updates_info_fields(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)

        buckets.handle_update_bucket_info(
            store,
            make_ctx(2),
            update_bucket_info_event(
                charged_read_quota=0,
                payment_address=OPERATOR,
                global_virtual_group_family_id=8,
            ),
        )

        bucket = get_bucket(db_session, key)
        assert bucket.charged_read_quota == 0
        assert bucket.payment_address == OPERATOR
        assert bucket.visibility == "VISIBILITY_TYPE_PUBLIC_READ"
        assert bucket.global_virtual_group_family_id == 8
        assert bucket.update_at == 2

    def test_preserves_migration_state(self, db_session: Session, store: MergeStore):
        """Info updates mid-migration change only quota/visibility fields."""
        key = create_test_bucket(store, height=1)
        buckets.handle_migration_bucket(
            store, make_ctx(2), migration_bucket_event(dst_primary_sp_id=200)
        )
        before = snapshot(get_bucket(db_session, key))

        buckets.handle_update_bucket_info(store, make_ctx(3), update_bucket_info_event())

        after = snapshot(get_bucket(db_session, key))
        assert after["status"] == BucketStatus.MIGRATING.value
        assert after["charged_read_quota"] == 2000
        for field in MIGRATION_FIELDS:
            assert after[field] == before[field], field
        assert after["migration_start_time"] == block_ts(2)
        assert after["dest_primary_sp_id"] == "200"

    def test_unknown_bucket_raises_not_found(self, store: MergeStore):
        with pytest.raises(NotFoundError):
            buckets.handle_update_bucket_info(store, make_ctx(2), update_bucket_info_event(42))


class TestBucketMigration:
    def test_migration_sets_migrating_and_clears_other_states(
        self, db_session: Session, store: MergeStore
    ):
        key = create_test_bucket(store, height=1)
        buckets.handle_reject_migrate_bucket(store, make_ctx(2), reject_migrate_bucket_event())

        buckets.handle_migration_bucket(
            store, make_ctx(3), migration_bucket_event(dst_primary_sp_id=300)
        )

        bucket = get_bucket(db_session, key)
        assert bucket.status == BucketStatus.MIGRATING.value
        assert bucket.migration_start_time == block_ts(3)
        assert bucket.dest_primary_sp_id == "300"
        assert bucket.migration_complete_time is None
        assert bucket.migration_reject_reason == ""
        assert populated_migration_states(bucket) == ["in_progress"]

    def test_complete_clears_pending_fields(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)
        buckets.handle_migration_bucket(
            store, make_ctx(2), migration_bucket_event(dst_primary_sp_id=100)
        )

        buckets.handle_complete_migration_bucket(
            store, make_ctx(3), complete_migration_bucket_event(gvg_family_id=9)
        )

        bucket = get_bucket(db_session, key)
        assert bucket.status == BucketStatus.CREATED.value
        assert bucket.migration_complete_time == block_ts(3)
        assert bucket.global_virtual_group_family_id == 9
        assert bucket.migration_start_time is None
        assert bucket.dest_primary_sp_id == ""
        assert bucket.migration_reject_reason == ""

    def test_full_migration_round_trip(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)

        buckets.handle_migration_bucket(
            store, make_ctx(2), migration_bucket_event(dst_primary_sp_id=300)
        )
        step1 = get_bucket(db_session, key)
        assert step1.status == BucketStatus.MIGRATING.value
        assert step1.migration_start_time is not None
        assert step1.dest_primary_sp_id == "300"

        buckets.handle_complete_migration_bucket(
            store, make_ctx(3), complete_migration_bucket_event()
        )
        final = get_bucket(db_session, key)
        assert final.status == BucketStatus.CREATED.value
        assert final.dest_primary_sp_id == ""
        assert final.migration_start_time is None
        assert final.migration_complete_time is not None
        assert populated_migration_states(final) == ["completed"]

    def test_cancel_clears_every_migration_field(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)
        buckets.handle_migration_bucket(store, make_ctx(2), migration_bucket_event())

        buckets.handle_cancel_migration_bucket(store, make_ctx(3), cancel_migration_bucket_event())

        bucket = get_bucket(db_session, key)
        assert bucket.status == BucketStatus.CREATED.value
        assert bucket.migration_start_time is None
        assert bucket.dest_primary_sp_id == ""
        assert bucket.migration_complete_time is None
        assert bucket.migration_reject_reason == ""
        assert populated_migration_states(bucket) == []

    def test_reject_records_reason_and_clears_others(
        self, db_session: Session, store: MergeStore
    ):
        key = create_test_bucket(store, height=1)
        buckets.handle_migration_bucket(store, make_ctx(2), migration_bucket_event())

        buckets.handle_reject_migrate_bucket(store, make_ctx(3), reject_migrate_bucket_event())

        bucket = get_bucket(db_session, key)
        assert bucket.status == BucketStatus.CREATED.value
        assert bucket.migration_reject_reason == buckets.MIGRATION_REJECTED_REASON
        assert bucket.migration_start_time is None
        assert bucket.dest_primary_sp_id == ""
        assert bucket.migration_complete_time is None
        assert populated_migration_states(bucket) == ["rejected"]

    def test_new_migration_after_completion_clears_completion(
        self, db_session: Session, store: MergeStore
    ):
        key = create_test_bucket(store, height=1)
        buckets.handle_migration_bucket(store, make_ctx(2), migration_bucket_event())
        buckets.handle_complete_migration_bucket(
            store, make_ctx(3), complete_migration_bucket_event()
        )

        buckets.handle_migration_bucket(
            store, make_ctx(4), migration_bucket_event(dst_primary_sp_id=400)
        )

        bucket = get_bucket(db_session, key)
        assert populated_migration_states(bucket) == ["in_progress"]
        assert bucket.dest_primary_sp_id == "400"


class TestDeleteAndDiscontinueBucket:
    def test_delete_only_sets_removed(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)
        before = snapshot(get_bucket(db_session, key))

        buckets.handle_delete_bucket(
            store,
            make_ctx(5),
            events.EventDeleteBucket(
                operator=OWNER, owner=OWNER, bucket_name="bucket-1", bucket_id=1
            ),
        )

        after = snapshot(get_bucket(db_session, key))
        assert after["removed"] is True
        changed = {k for k in after if after[k] != before[k]}
        assert changed == {"removed", "update_at", "update_tx_hash", "update_time"}

    def test_discontinue_sets_status_and_reason(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)

        buckets.handle_discontinue_bucket(
            store,
            make_ctx(6),
            events.EventDiscontinueBucket(
                bucket_id=1, bucket_name="bucket-1", reason="abuse", delete_at=1_800_000_000
            ),
        )

        bucket = get_bucket(db_session, key)
        assert bucket.status == BucketStatus.DISCONTINUED.value
        assert bucket.delete_reason == "abuse"
        assert bucket.delete_at == 1_800_000_000
        assert bucket.removed is False
