"""Event router.

Maps fully-qualified ledger event names onto payload models and projector
handlers. The set of handled events is closed: EventType enumerates them and
both lookup tables must cover every member (checked at import time).

Entry points:
- parse_event: raw attribute mapping -> typed payload
- route_event: typed payload -> projector handler (no transaction handling)
- apply_event / apply_raw_event: one event in one database transaction
"""

import json
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from indexer.db.session import transaction
from indexer.db.store import MergeStore
from indexer.errors import EventTypeMismatchError, MalformedEventError
from indexer.ledger import LedgerContext
from indexer.logging import clear_event_context, get_logger, set_event_context
from indexer.schemas import events
from indexer.schemas.events import StorageEvent
from indexer.services import buckets, objects

logger = get_logger(__name__)

EVENT_NAMESPACE = "greenfield.storage"


class EventType(str, Enum):
    """Storage events the indexer projects."""

    # Bucket events
    CREATE_BUCKET = f"{EVENT_NAMESPACE}.EventCreateBucket"
    DELETE_BUCKET = f"{EVENT_NAMESPACE}.EventDeleteBucket"
    UPDATE_BUCKET_INFO = f"{EVENT_NAMESPACE}.EventUpdateBucketInfo"
    DISCONTINUE_BUCKET = f"{EVENT_NAMESPACE}.EventDiscontinueBucket"
    MIGRATION_BUCKET = f"{EVENT_NAMESPACE}.EventMigrationBucket"
    COMPLETE_MIGRATION_BUCKET = f"{EVENT_NAMESPACE}.EventCompleteMigrationBucket"
    CANCEL_MIGRATION_BUCKET = f"{EVENT_NAMESPACE}.EventCancelMigrationBucket"
    REJECT_MIGRATE_BUCKET = f"{EVENT_NAMESPACE}.EventRejectMigrateBucket"

    # Object events
    CREATE_OBJECT = f"{EVENT_NAMESPACE}.EventCreateObject"
    CANCEL_CREATE_OBJECT = f"{EVENT_NAMESPACE}.EventCancelCreateObject"
    SEAL_OBJECT = f"{EVENT_NAMESPACE}.EventSealObject"
    COPY_OBJECT = f"{EVENT_NAMESPACE}.EventCopyObject"
    DELETE_OBJECT = f"{EVENT_NAMESPACE}.EventDeleteObject"
    REJECT_SEAL_OBJECT = f"{EVENT_NAMESPACE}.EventRejectSealObject"
    DISCONTINUE_OBJECT = f"{EVENT_NAMESPACE}.EventDiscontinueObject"
    UPDATE_OBJECT_INFO = f"{EVENT_NAMESPACE}.EventUpdateObjectInfo"
    UPDATE_OBJECT_CONTENT = f"{EVENT_NAMESPACE}.EventUpdateObjectContent"
    UPDATE_OBJECT_CONTENT_SUCCESS = f"{EVENT_NAMESPACE}.EventUpdateObjectContentSuccess"
    CANCEL_UPDATE_OBJECT_CONTENT = f"{EVENT_NAMESPACE}.EventCancelUpdateObjectContent"
    MIRROR_OBJECT = f"{EVENT_NAMESPACE}.EventMirrorObject"
    MIRROR_OBJECT_RESULT = f"{EVENT_NAMESPACE}.EventMirrorObjectResult"

    @classmethod
    def lookup(cls, event_type: str) -> "EventType | None":
        """Return the member for a type tag, or None for events we don't project."""
        try:
            return cls(event_type)
        except ValueError:
            return None


Handler = Callable[[MergeStore, LedgerContext, Any], None]

# Event type to payload model mapping
EVENT_MODELS: dict[EventType, type[StorageEvent]] = {
    EventType.CREATE_BUCKET: events.EventCreateBucket,
    EventType.DELETE_BUCKET: events.EventDeleteBucket,
    EventType.UPDATE_BUCKET_INFO: events.EventUpdateBucketInfo,
    EventType.DISCONTINUE_BUCKET: events.EventDiscontinueBucket,
    EventType.MIGRATION_BUCKET: events.EventMigrationBucket,
    EventType.COMPLETE_MIGRATION_BUCKET: events.EventCompleteMigrationBucket,
    EventType.CANCEL_MIGRATION_BUCKET: events.EventCancelMigrationBucket,
    EventType.REJECT_MIGRATE_BUCKET: events.EventRejectMigrateBucket,
    EventType.CREATE_OBJECT: events.EventCreateObject,
    EventType.CANCEL_CREATE_OBJECT: events.EventCancelCreateObject,
    EventType.SEAL_OBJECT: events.EventSealObject,
    EventType.COPY_OBJECT: events.EventCopyObject,
    EventType.DELETE_OBJECT: events.EventDeleteObject,
    EventType.REJECT_SEAL_OBJECT: events.EventRejectSealObject,
    EventType.DISCONTINUE_OBJECT: events.EventDiscontinueObject,
    EventType.UPDATE_OBJECT_INFO: events.EventUpdateObjectInfo,
    EventType.UPDATE_OBJECT_CONTENT: events.EventUpdateObjectContent,
    EventType.UPDATE_OBJECT_CONTENT_SUCCESS: events.EventUpdateObjectContentSuccess,
    EventType.CANCEL_UPDATE_OBJECT_CONTENT: events.EventCancelUpdateObjectContent,
    EventType.MIRROR_OBJECT: events.EventMirrorObject,
    EventType.MIRROR_OBJECT_RESULT: events.EventMirrorObjectResult,
}

# Event type to projector handler mapping
EVENT_HANDLERS: dict[EventType, Handler] = {
    EventType.CREATE_BUCKET: buckets.handle_create_bucket,
    EventType.DELETE_BUCKET: buckets.handle_delete_bucket,
    EventType.UPDATE_BUCKET_INFO: buckets.handle_update_bucket_info,
    EventType.DISCONTINUE_BUCKET: buckets.handle_discontinue_bucket,
    EventType.MIGRATION_BUCKET: buckets.handle_migration_bucket,
    EventType.COMPLETE_MIGRATION_BUCKET: buckets.handle_complete_migration_bucket,
    EventType.CANCEL_MIGRATION_BUCKET: buckets.handle_cancel_migration_bucket,
    EventType.REJECT_MIGRATE_BUCKET: buckets.handle_reject_migrate_bucket,
    EventType.CREATE_OBJECT: objects.handle_create_object,
    EventType.CANCEL_CREATE_OBJECT: objects.handle_cancel_create_object,
    EventType.SEAL_OBJECT: objects.handle_seal_object,
    EventType.COPY_OBJECT: objects.handle_copy_object,
    EventType.DELETE_OBJECT: objects.handle_delete_object,
    EventType.REJECT_SEAL_OBJECT: objects.handle_reject_seal_object,
    EventType.DISCONTINUE_OBJECT: objects.handle_discontinue_object,
    EventType.UPDATE_OBJECT_INFO: objects.handle_update_object_info,
    EventType.UPDATE_OBJECT_CONTENT: objects.handle_update_object_content,
    EventType.UPDATE_OBJECT_CONTENT_SUCCESS: objects.handle_update_object_content_success,
    EventType.CANCEL_UPDATE_OBJECT_CONTENT: objects.handle_cancel_update_object_content,
    EventType.MIRROR_OBJECT: objects.handle_mirror_object,
    EventType.MIRROR_OBJECT_RESULT: objects.handle_mirror_object_result,
}

_missing = set(EventType) - (EVENT_MODELS.keys() & EVENT_HANDLERS.keys())
if _missing:
    raise RuntimeError(f"event types without model or handler: {sorted(m.value for m in _missing)}")


_JSON_OPENERS = ('"', "[", "{")


def _decode_attribute(value: Any) -> Any:
    # Ledger event attributes are JSON-encoded. Only quoted strings, lists and
    # objects are decoded: bare scalars ("2024", "true", "null") are left as
    # text and coerced per field by the payload model.
    if not isinstance(value, str) or not value.startswith(_JSON_OPENERS):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


def parse_event(event_type: str, attributes: Mapping[str, Any]) -> StorageEvent | None:
    """Validate raw event attributes into the typed payload for event_type.

    Returns:
        The typed payload, or None if event_type is not projected.

    Raises:
        MalformedEventError: If the attributes do not fit the payload model.
    """
    member = EventType.lookup(event_type)
    if member is None:
        return None

    decoded = {key: _decode_attribute(value) for key, value in attributes.items()}
    try:
        return EVENT_MODELS[member].model_validate(decoded)
    except ValidationError as e:
        logger.error("parse_typed_event_error", event_type=event_type, error=str(e))
        raise MalformedEventError(event_type, f"{e.error_count()} invalid field(s)") from e


def route_event(
    store: MergeStore, event_type: str, event: StorageEvent, ctx: LedgerContext
) -> bool:
    """Dispatch one typed event to its projector handler.

    Returns:
        True if the event was projected, False if event_type is not handled.

    Raises:
        EventTypeMismatchError: If the payload class does not match event_type.
            Raised before any write.
    """
    member = EventType.lookup(event_type)
    if member is None:
        return False

    expected = EVENT_MODELS[member]
    if not isinstance(event, expected):
        logger.error(
            "type_assert_error",
            expected=expected.__name__,
            received=type(event).__name__,
        )
        raise EventTypeMismatchError(event_type, type(event).__name__)

    EVENT_HANDLERS[member](store, ctx, event)
    return True


def apply_event(db: Session, event_type: str, event: StorageEvent, ctx: LedgerContext) -> bool:
    """Project one typed event inside its own transaction.

    Commits on success; on any error the transaction is rolled back, so a
    failing event leaves no partial writes.

    Returns:
        True if the event was projected, False if event_type is not handled.
    """
    set_event_context(ctx.block_height, tx_hash=ctx.tx_hash, event_type=event_type)
    try:
        with transaction(db):
            return route_event(MergeStore(db), event_type, event, ctx)
    finally:
        clear_event_context()


def apply_raw_event(
    db: Session, event_type: str, attributes: Mapping[str, Any], ctx: LedgerContext
) -> bool:
    """Parse and project one raw event.

    Returns:
        True if the event was projected, False if event_type is not handled.
    """
    event = parse_event(event_type, attributes)
    if event is None:
        return False
    return apply_event(db, event_type, event, ctx)
