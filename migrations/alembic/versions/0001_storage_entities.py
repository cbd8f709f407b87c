"""Storage entities - buckets and objects

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the two entity tables projected from ledger storage events. Every
non-key column is nullable so records can be updated through field patches.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("create_at", sa.BigInteger(), nullable=True),
        sa.Column("create_tx_hash", sa.String(66), nullable=True),
        sa.Column("create_time", sa.BigInteger(), nullable=True),
        sa.Column("update_at", sa.BigInteger(), nullable=True),
        sa.Column("update_tx_hash", sa.String(66), nullable=True),
        sa.Column("update_time", sa.BigInteger(), nullable=True),
    ]


def upgrade() -> None:
    # ==========================================================================
    # buckets table
    # ==========================================================================
    op.create_table(
        "buckets",
        sa.Column("bucket_id", sa.String(66), nullable=False),
        sa.Column("bucket_name", sa.Text(), nullable=True),
        sa.Column("owner", sa.String(42), nullable=True),
        sa.Column("payment_address", sa.String(42), nullable=True),
        sa.Column("operator", sa.String(42), nullable=True),
        sa.Column("global_virtual_group_family_id", sa.Integer(), nullable=True),
        sa.Column("charged_read_quota", sa.BigInteger(), nullable=True),
        sa.Column("visibility", sa.Text(), nullable=True),
        sa.Column("source_type", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=True),
        sa.Column("removed", sa.Boolean(), nullable=True),
        sa.Column("delete_reason", sa.Text(), nullable=True),
        sa.Column("delete_at", sa.BigInteger(), nullable=True),
        # Migration sub-state
        sa.Column("migration_start_time", sa.BigInteger(), nullable=True),
        sa.Column("dest_primary_sp_id", sa.Text(), nullable=True),
        sa.Column("migration_complete_time", sa.BigInteger(), nullable=True),
        sa.Column("migration_reject_reason", sa.Text(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("bucket_id"),
    )
    op.create_index("idx_buckets_bucket_name", "buckets", ["bucket_name"])
    op.create_index("idx_buckets_owner", "buckets", ["owner"])

    # ==========================================================================
    # objects table
    # ==========================================================================
    op.create_table(
        "objects",
        sa.Column("object_id", sa.String(66), nullable=False),
        sa.Column("object_name", sa.Text(), nullable=True),
        sa.Column("bucket_name", sa.Text(), nullable=True),
        sa.Column("bucket_id", sa.String(66), nullable=True),
        sa.Column("payload_size", sa.BigInteger(), nullable=True),
        sa.Column("checksums", sa.JSON(), nullable=True),
        sa.Column("content_type", sa.Text(), nullable=True),
        sa.Column("version", sa.BigInteger(), nullable=True),
        sa.Column("redundancy_type", sa.Text(), nullable=True),
        sa.Column("visibility", sa.Text(), nullable=True),
        sa.Column("source_type", sa.Text(), nullable=True),
        sa.Column("creator", sa.String(42), nullable=True),
        sa.Column("owner", sa.String(42), nullable=True),
        sa.Column("operator", sa.String(42), nullable=True),
        sa.Column("updater", sa.String(42), nullable=True),
        sa.Column("status", sa.Text(), nullable=True),
        sa.Column("removed", sa.Boolean(), nullable=True),
        sa.Column("local_virtual_group_id", sa.Integer(), nullable=True),
        sa.Column("sealed_tx_hash", sa.String(66), nullable=True),
        sa.Column("delete_reason", sa.Text(), nullable=True),
        sa.Column("delete_at", sa.BigInteger(), nullable=True),
        # Content-update sub-state
        sa.Column("is_updating", sa.Boolean(), nullable=True),
        sa.Column("content_updated_time", sa.BigInteger(), nullable=True),
        # Mirror sub-state
        sa.Column("mirror_status", sa.Text(), nullable=True),
        sa.Column("mirror_fail_reason", sa.Text(), nullable=True),
        sa.Column("dest_chain_id", sa.Integer(), nullable=True),
        sa.Column("source_chain_id", sa.Integer(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("object_id"),
    )
    op.create_index(
        "idx_objects_bucket_name_object_name", "objects", ["bucket_name", "object_name"]
    )
    op.create_index("idx_objects_owner", "objects", ["owner"])


def downgrade() -> None:
    op.drop_index("idx_objects_owner", table_name="objects")
    op.drop_index("idx_objects_bucket_name_object_name", table_name="objects")
    op.drop_table("objects")
    op.drop_index("idx_buckets_owner", table_name="buckets")
    op.drop_index("idx_buckets_bucket_name", table_name="buckets")
    op.drop_table("buckets")
