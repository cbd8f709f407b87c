"""Tests for the partial merge store.

Verifies:
- create inserts full records and refuses existing keys
- merge writes exactly the fields a patch sets, zero values included
- merge refuses unknown keys, empty patches and stale heights
- a failed operation leaves stored data unchanged
"""

import pytest
from sqlalchemy.orm import Session

from indexer.db.models import Bucket, Object
from indexer.db.store import MergeStore
from indexer.errors import AlreadyExistsError, InvalidPatchError, NotFoundError, OutOfOrderError
from indexer.ledger import big_to_hash
from indexer.schemas.patches import BucketPatch, ObjectPatch
from tests.factories import create_test_bucket, create_test_object, get_bucket, get_object, snapshot


def _bucket(bucket_id: int = 1, **fields) -> Bucket:
    defaults = {
        "bucket_id": big_to_hash(bucket_id),
        "bucket_name": f"bucket-{bucket_id}",
        "charged_read_quota": 1000,
        "status": "BUCKET_STATUS_CREATED",
        "removed": False,
        "update_at": 1,
    }
    defaults.update(fields)
    return Bucket(**defaults)


class TestCreateAndGet:
    def test_create_then_get(self, db_session: Session, store: MergeStore):
        store.create(_bucket(1))
        db_session.commit()

        bucket = store.get(Bucket, big_to_hash(1))
        assert bucket.bucket_name == "bucket-1"
        assert bucket.charged_read_quota == 1000

    def test_get_missing_raises(self, store: MergeStore):
        with pytest.raises(NotFoundError):
            store.get(Object, big_to_hash(404))

    def test_exists(self, store: MergeStore):
        store.create(_bucket(1))
        assert store.exists(Bucket, big_to_hash(1))
        assert not store.exists(Bucket, big_to_hash(2))

    def test_duplicate_create_raises(self, db_session: Session, store: MergeStore):
        store.create(_bucket(1))
        db_session.commit()

        with pytest.raises(AlreadyExistsError):
            store.create(_bucket(1, bucket_name="other"))

        assert get_bucket(db_session, big_to_hash(1)).bucket_name == "bucket-1"

    def test_same_key_in_different_tables(self, store: MergeStore):
        create_test_bucket(store, bucket_id=7)
        create_test_object(store, object_id=7)

        assert store.exists(Bucket, big_to_hash(7))
        assert store.exists(Object, big_to_hash(7))


class TestMerge:
    def test_writes_only_patched_fields(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)
        db_session.commit()
        before = snapshot(get_bucket(db_session, key))

        store.merge(Bucket, key, BucketPatch(visibility="VISIBILITY_TYPE_PUBLIC_READ"))
        db_session.commit()

        after = snapshot(get_bucket(db_session, key))
        changed = {k for k in after if after[k] != before[k]}
        assert changed == {"visibility"}

    def test_zero_values_are_written(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)

        store.merge(
            Bucket,
            key,
            BucketPatch(charged_read_quota=0, source_type="", migration_start_time=None),
        )

        bucket = get_bucket(db_session, key)
        assert bucket.charged_read_quota == 0
        assert bucket.source_type == ""
        assert bucket.migration_start_time is None

    def test_list_column_written(self, db_session: Session, store: MergeStore):
        key = create_test_object(store)

        store.merge(Object, key, ObjectPatch(checksums=[]))

        assert get_object(db_session, key).checksums == []

    def test_loaded_instance_reflects_merge(self, db_session: Session, store: MergeStore):
        """An entity already in the session sees merged values without a reload."""
        key = create_test_bucket(store, height=1)
        bucket = store.get(Bucket, key)

        store.merge(Bucket, key, BucketPatch(charged_read_quota=7, update_at=2))

        assert bucket.charged_read_quota == 7
        assert bucket.update_at == 2

    def test_missing_key_raises(self, store: MergeStore):
        with pytest.raises(NotFoundError):
            store.merge(Bucket, big_to_hash(404), BucketPatch(removed=True))

    def test_empty_patch_raises(self, store: MergeStore):
        key = create_test_bucket(store)
        with pytest.raises(InvalidPatchError):
            store.merge(Bucket, key, BucketPatch())

    def test_merge_is_idempotent(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=1)
        patch = BucketPatch(charged_read_quota=5, update_at=3)

        store.merge(Bucket, key, patch)
        first = snapshot(get_bucket(db_session, key))
        store.merge(Bucket, key, patch)

        assert snapshot(get_bucket(db_session, key)) == first


class TestOrdering:
    def test_equal_height_accepted(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=5)

        store.merge(Bucket, key, BucketPatch(charged_read_quota=1, update_at=5))

        assert get_bucket(db_session, key).charged_read_quota == 1

    def test_lower_height_raises_and_writes_nothing(
        self, db_session: Session, store: MergeStore
    ):
        key = create_test_bucket(store, height=5)
        db_session.commit()
        before = snapshot(get_bucket(db_session, key))

        with pytest.raises(OutOfOrderError):
            store.merge(Bucket, key, BucketPatch(charged_read_quota=1, update_at=4))

        assert snapshot(get_bucket(db_session, key)) == before

    def test_patch_without_height_is_unguarded(self, db_session: Session, store: MergeStore):
        key = create_test_bucket(store, height=5)

        store.merge(Bucket, key, BucketPatch(delete_reason="manual"))

        assert get_bucket(db_session, key).delete_reason == "manual"
