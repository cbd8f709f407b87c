"""Field patch schemas.

A field patch is a sparse, presence-aware description of an entity update:
only the fields passed to the constructor are applied, everything else in the
stored record stays exactly as it is. Presence is tracked by pydantic
(`model_fields_set`), so a field explicitly set to a zero value ("", 0,
False, None) is distinguishable from a field that was never mentioned.

    BucketPatch(status="BUCKET_STATUS_CREATED", migration_start_time=None)
        -> changes() == {"status": ..., "migration_start_time": None}

    BucketPatch(charged_read_quota=0)
        -> changes() == {"charged_read_quota": 0}

Identity fields (ids, names) are not declared on any patch: they can only be
written when an entity is created.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class FieldPatch(BaseModel):
    """Base class for entity patches.

    Subclasses declare every mutable column as optional with a None default.
    Unknown fields are rejected so a misspelled column fails loudly instead of
    being silently dropped.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    # Audit fields shared by every entity
    update_at: int | None = None
    update_tx_hash: str | None = None
    update_time: int | None = None

    removed: bool | None = None

    @field_validator("removed")
    @classmethod
    def removed_is_monotonic(cls, value: bool | None) -> bool | None:
        # Soft deletion is terminal
        if value is False:
            raise ValueError("removed can only be set to True by a patch")
        return value

    def changes(self) -> dict[str, Any]:
        """Return exactly the fields this patch sets, including zero values."""
        return self.model_dump(exclude_unset=True)

    def touches(self, field: str) -> bool:
        """Whether this patch sets the given field."""
        return field in self.model_fields_set

    def __bool__(self) -> bool:
        return bool(self.model_fields_set)


class BucketPatch(FieldPatch):
    """Patch over the mutable columns of a bucket."""

    owner: str | None = None
    payment_address: str | None = None
    operator: str | None = None
    global_virtual_group_family_id: int | None = None
    charged_read_quota: int | None = None
    visibility: str | None = None
    source_type: str | None = None

    status: str | None = None
    delete_reason: str | None = None
    delete_at: int | None = None

    migration_start_time: int | None = None
    dest_primary_sp_id: str | None = None
    migration_complete_time: int | None = None
    migration_reject_reason: str | None = None


class ObjectPatch(FieldPatch):
    """Patch over the mutable columns of an object."""

    payload_size: int | None = None
    checksums: list[str] | None = None
    content_type: str | None = None
    version: int | None = None
    redundancy_type: str | None = None
    visibility: str | None = None
    source_type: str | None = None

    creator: str | None = None
    owner: str | None = None
    operator: str | None = None
    updater: str | None = None

    status: str | None = None
    local_virtual_group_id: int | None = None
    sealed_tx_hash: str | None = None
    delete_reason: str | None = None
    delete_at: int | None = None

    is_updating: bool | None = None
    content_updated_time: int | None = None

    mirror_status: str | None = None
    mirror_fail_reason: str | None = None
    dest_chain_id: int | None = None
    source_chain_id: int | None = None
