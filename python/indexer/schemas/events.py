"""Typed payloads of the ledger storage-module events.

One model per event type. Field names follow the ledger's JSON encoding of
the events; ids arrive as decimal strings or integers and addresses are
normalized on validation.

Enumerated values (status, visibility, redundancy and source types) are
kept as the ledger's enum names, e.g. "VISIBILITY_TYPE_PRIVATE".
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from indexer.ledger import hex_to_address

Address = Annotated[str, AfterValidator(hex_to_address)]
LedgerId = Annotated[int, Field(ge=0)]


class StorageEvent(BaseModel):
    """Base class for all storage events."""

    model_config = ConfigDict(extra="ignore", frozen=True)


# =============================================================================
# Bucket Events
# =============================================================================


class EventCreateBucket(StorageEvent):
    owner: Address
    bucket_name: str
    visibility: str
    create_at: int
    bucket_id: LedgerId
    source_type: str
    charged_read_quota: int = 0
    payment_address: Address
    primary_sp_id: int = 0
    status: str
    global_virtual_group_family_id: int = 0


class EventDeleteBucket(StorageEvent):
    operator: Address | None = None
    owner: Address | None = None
    bucket_name: str
    bucket_id: LedgerId
    global_virtual_group_family_id: int = 0


class EventUpdateBucketInfo(StorageEvent):
    operator: Address | None = None
    bucket_name: str
    bucket_id: LedgerId
    charged_read_quota: int = 0
    payment_address: Address
    visibility: str
    global_virtual_group_family_id: int = 0


class EventDiscontinueBucket(StorageEvent):
    bucket_id: LedgerId
    bucket_name: str
    reason: str = ""
    delete_at: int = 0


class EventMigrationBucket(StorageEvent):
    operator: Address | None = None
    bucket_name: str
    bucket_id: LedgerId
    dst_primary_sp_id: int


class EventCompleteMigrationBucket(StorageEvent):
    operator: Address | None = None
    bucket_name: str
    bucket_id: LedgerId
    global_virtual_group_family_id: int = 0
    src_primary_sp_id: int = 0


class EventCancelMigrationBucket(StorageEvent):
    operator: Address | None = None
    bucket_name: str
    bucket_id: LedgerId


class EventRejectMigrateBucket(StorageEvent):
    operator: Address | None = None
    bucket_name: str
    bucket_id: LedgerId


# =============================================================================
# Object Events
# =============================================================================


class EventCreateObject(StorageEvent):
    creator: Address
    owner: Address
    bucket_name: str
    object_name: str
    bucket_id: LedgerId
    object_id: LedgerId
    primary_sp_id: int = 0
    payload_size: int = 0
    visibility: str
    content_type: str = ""
    create_at: int
    status: str
    redundancy_type: str
    source_type: str
    checksums: list[str] = Field(default_factory=list)


class EventSealObject(StorageEvent):
    operator: Address
    bucket_name: str
    object_name: str
    object_id: LedgerId
    status: str
    global_virtual_group_id: int = 0
    local_virtual_group_id: int = 0


class EventCancelCreateObject(StorageEvent):
    operator: Address
    bucket_name: str
    object_name: str
    primary_sp_id: int = 0
    object_id: LedgerId


class EventCopyObject(StorageEvent):
    operator: Address
    src_bucket_name: str
    dst_bucket_name: str
    src_object_name: str
    dst_object_name: str
    src_object_id: LedgerId
    dst_object_id: LedgerId


class EventDeleteObject(StorageEvent):
    operator: Address | None = None
    bucket_name: str
    object_name: str
    object_id: LedgerId
    local_virtual_group_id: int = 0


class EventRejectSealObject(StorageEvent):
    operator: Address
    bucket_name: str
    object_name: str
    object_id: LedgerId


class EventDiscontinueObject(StorageEvent):
    bucket_name: str
    object_id: LedgerId
    reason: str = ""
    delete_at: int = 0


class EventUpdateObjectInfo(StorageEvent):
    operator: Address
    bucket_name: str
    object_name: str
    object_id: LedgerId
    visibility: str


class EventUpdateObjectContent(StorageEvent):
    operator: Address
    object_id: LedgerId
    bucket_name: str
    object_name: str
    payload_size: int = 0
    checksums: list[str] = Field(default_factory=list)
    version: int = 0


class EventUpdateObjectContentSuccess(StorageEvent):
    operator: Address
    object_id: LedgerId
    bucket_name: str
    object_name: str
    content_type: str = ""
    prev_payload_size: int = 0
    new_payload_size: int = 0
    prev_checksums: list[str] = Field(default_factory=list)
    new_checksums: list[str] = Field(default_factory=list)
    version: int = 0
    updated_at: int = 0


class EventCancelUpdateObjectContent(StorageEvent):
    operator: Address
    bucket_name: str
    object_name: str
    object_id: LedgerId


class EventMirrorObject(StorageEvent):
    operator: Address
    bucket_name: str
    object_name: str
    object_id: LedgerId
    dest_chain_id: int


class EventMirrorObjectResult(StorageEvent):
    """Result of a cross-chain mirror; status 0 means success.

    The ledger reports only a status code, never a failure reason.
    """

    status: int
    bucket_name: str
    object_name: str
    object_id: LedgerId
    dest_chain_id: int
