"""Object projector.

One handler per object event type. Creation and copy insert full records;
every other event is applied as an ObjectPatch naming exactly the fields it
changes.

Content update flow:
    SEALED(is_updating=False)
        --UpdateObjectContent(payload > 0)--> SEALED(is_updating=True)
        --UpdateObjectContentSuccess | CancelUpdateObjectContent--> SEALED(is_updating=False)

An UpdateObjectContent with a zero payload is applied immediately by the
ledger, so it moves straight to the new content with is_updating=False.

Synthesized transitions:
- RejectSealObject: the ledger never emits a delete for an object whose seal
  was rejected, so the rejection itself soft-deletes the record.
"""

from indexer.db.models import MirrorStatus, Object, ObjectStatus
from indexer.db.store import MergeStore
from indexer.ledger import ZERO_ADDRESS, LedgerContext, big_to_hash
from indexer.logging import get_logger
from indexer.schemas.events import (
    EventCancelCreateObject,
    EventCancelUpdateObjectContent,
    EventCopyObject,
    EventCreateObject,
    EventDeleteObject,
    EventDiscontinueObject,
    EventMirrorObject,
    EventMirrorObjectResult,
    EventRejectSealObject,
    EventSealObject,
    EventUpdateObjectContent,
    EventUpdateObjectContentSuccess,
    EventUpdateObjectInfo,
)
from indexer.schemas.patches import ObjectPatch

logger = get_logger(__name__)

# Placeholder: the mirror result event carries a status code but no reason
MIRROR_FAILED_REASON = "Mirror operation failed on destination chain"

# Columns a copy inherits from its source object
COPIED_COLUMNS: tuple[str, ...] = (
    "creator",
    "owner",
    "payload_size",
    "checksums",
    "content_type",
    "version",
    "redundancy_type",
    "visibility",
    "source_type",
)


def _audit(ctx: LedgerContext) -> dict:
    return {
        "update_at": ctx.block_height,
        "update_tx_hash": ctx.tx_hash,
        "update_time": ctx.block_timestamp,
    }


# =============================================================================
# Creation
# =============================================================================


def handle_create_object(store: MergeStore, ctx: LedgerContext, event: EventCreateObject) -> None:
    obj = Object(
        object_id=big_to_hash(event.object_id),
        object_name=event.object_name,
        bucket_name=event.bucket_name,
        bucket_id=big_to_hash(event.bucket_id),
        creator=event.creator,
        owner=event.owner,
        payload_size=event.payload_size,
        visibility=event.visibility,
        content_type=event.content_type,
        status=event.status,
        redundancy_type=event.redundancy_type,
        source_type=event.source_type,
        checksums=list(event.checksums),
        is_updating=False,
        mirror_status=MirrorStatus.NONE.value,
        removed=False,
        create_at=ctx.block_height,
        create_tx_hash=ctx.tx_hash,
        create_time=event.create_at,
        update_at=ctx.block_height,
        update_tx_hash=ctx.tx_hash,
        update_time=event.create_at,
    )
    store.create(obj)
    logger.info(
        "object_created",
        object_id=obj.object_id,
        bucket_name=obj.bucket_name,
        object_name=obj.object_name,
    )


def handle_copy_object(store: MergeStore, ctx: LedgerContext, event: EventCopyObject) -> None:
    """Clone the source object under the destination identity.

    Content and ownership are inherited; lifecycle sub-state starts fresh and
    the audit trail points at this event.

    The event names the destination bucket but not its id, so bucket_id is
    inherited only when the copy stays in the source bucket and is left
    unset for a cross-bucket copy.

    Raises:
        NotFoundError: If the source object is not indexed.
    """
    source = store.get(Object, big_to_hash(event.src_object_id))

    copy = Object(
        object_id=big_to_hash(event.dst_object_id),
        object_name=event.dst_object_name,
        bucket_name=event.dst_bucket_name,
        operator=event.operator,
        status=ObjectStatus.CREATED.value,
        is_updating=False,
        mirror_status=MirrorStatus.NONE.value,
        removed=False,
        create_at=ctx.block_height,
        create_tx_hash=ctx.tx_hash,
        create_time=ctx.block_timestamp,
        **_audit(ctx),
    )
    for column in COPIED_COLUMNS:
        value = getattr(source, column)
        setattr(copy, column, list(value) if isinstance(value, list) else value)
    if event.dst_bucket_name == source.bucket_name:
        copy.bucket_id = source.bucket_id

    store.create(copy)
    logger.info(
        "object_copied",
        src_object_id=source.object_id,
        object_id=copy.object_id,
        bucket_name=copy.bucket_name,
        object_name=copy.object_name,
    )


# =============================================================================
# Sealing and deletion
# =============================================================================


def handle_seal_object(store: MergeStore, ctx: LedgerContext, event: EventSealObject) -> None:
    patch = ObjectPatch(
        operator=event.operator,
        local_virtual_group_id=event.local_virtual_group_id,
        status=event.status,
        sealed_tx_hash=ctx.tx_hash,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)


def handle_cancel_create_object(
    store: MergeStore, ctx: LedgerContext, event: EventCancelCreateObject
) -> None:
    patch = ObjectPatch(operator=event.operator, removed=True, **_audit(ctx))
    store.merge(Object, big_to_hash(event.object_id), patch)


def handle_delete_object(store: MergeStore, ctx: LedgerContext, event: EventDeleteObject) -> None:
    patch = ObjectPatch(
        local_virtual_group_id=event.local_virtual_group_id,
        removed=True,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)


def handle_reject_seal_object(
    store: MergeStore, ctx: LedgerContext, event: EventRejectSealObject
) -> None:
    # Synthesized delete; status is left as is
    patch = ObjectPatch(operator=event.operator, removed=True, **_audit(ctx))
    store.merge(Object, big_to_hash(event.object_id), patch)
    logger.info("object_seal_rejected", bucket_name=event.bucket_name, object_name=event.object_name)


def handle_discontinue_object(
    store: MergeStore, ctx: LedgerContext, event: EventDiscontinueObject
) -> None:
    patch = ObjectPatch(
        status=ObjectStatus.DISCONTINUED.value,
        delete_reason=event.reason,
        delete_at=event.delete_at,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)


def handle_update_object_info(
    store: MergeStore, ctx: LedgerContext, event: EventUpdateObjectInfo
) -> None:
    # Status and is_updating are absent so sealing/updating state survives
    patch = ObjectPatch(operator=event.operator, visibility=event.visibility, **_audit(ctx))
    store.merge(Object, big_to_hash(event.object_id), patch)


# =============================================================================
# Content updates
# =============================================================================


def handle_update_object_content(
    store: MergeStore, ctx: LedgerContext, event: EventUpdateObjectContent
) -> None:
    if event.payload_size == 0:
        # Empty payloads are applied by the ledger at once. The event has no
        # content type, so the stored one is kept.
        patch = ObjectPatch(
            status=ObjectStatus.SEALED.value,
            is_updating=False,
            payload_size=0,
            checksums=list(event.checksums),
            version=event.version,
            updater=event.operator,
            content_updated_time=ctx.block_timestamp,
            **_audit(ctx),
        )
    else:
        # Open the pending window; new metadata arrives with the success event
        patch = ObjectPatch(
            status=ObjectStatus.SEALED.value,
            is_updating=True,
            updater=event.operator,
            **_audit(ctx),
        )
    store.merge(Object, big_to_hash(event.object_id), patch)
    logger.info(
        "object_content_update_started",
        object_id=big_to_hash(event.object_id),
        payload_size=event.payload_size,
        pending=event.payload_size != 0,
    )


def handle_update_object_content_success(
    store: MergeStore, ctx: LedgerContext, event: EventUpdateObjectContentSuccess
) -> None:
    patch = ObjectPatch(
        status=ObjectStatus.SEALED.value,
        is_updating=False,
        payload_size=event.new_payload_size,
        checksums=list(event.new_checksums),
        content_type=event.content_type,
        version=event.version,
        updater=event.operator,
        content_updated_time=event.updated_at,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)


def handle_cancel_update_object_content(
    store: MergeStore, ctx: LedgerContext, event: EventCancelUpdateObjectContent
) -> None:
    patch = ObjectPatch(
        status=ObjectStatus.SEALED.value,
        is_updating=False,
        updater=ZERO_ADDRESS,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)


# =============================================================================
# Mirroring
# =============================================================================


def handle_mirror_object(store: MergeStore, ctx: LedgerContext, event: EventMirrorObject) -> None:
    patch = ObjectPatch(
        mirror_status=MirrorStatus.PENDING.value,
        mirror_fail_reason="",
        dest_chain_id=event.dest_chain_id,
        source_chain_id=ctx.chain_id,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)


def handle_mirror_object_result(
    store: MergeStore, ctx: LedgerContext, event: EventMirrorObjectResult
) -> None:
    if event.status == 0:
        mirror_status = MirrorStatus.SUCCESS
        fail_reason = ""
    else:
        mirror_status = MirrorStatus.FAILED
        fail_reason = MIRROR_FAILED_REASON

    patch = ObjectPatch(
        mirror_status=mirror_status.value,
        mirror_fail_reason=fail_reason,
        dest_chain_id=event.dest_chain_id,
        **_audit(ctx),
    )
    store.merge(Object, big_to_hash(event.object_id), patch)
    if mirror_status is MirrorStatus.FAILED:
        logger.warning(
            "object_mirror_failed",
            object_id=big_to_hash(event.object_id),
            dest_chain_id=event.dest_chain_id,
            status_code=event.status,
        )
