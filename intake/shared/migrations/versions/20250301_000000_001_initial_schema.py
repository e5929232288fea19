# pylint: skip-file
# ruff: noqa
"""Initial schema - processing queue and moderated targets

Revision ID: 001
Revises:
Create Date: 2025-03-01 00:00:00

Tables created:
- artworks: Artist submissions (processing columns + CRUD-owned fields)
- frames: Print shop frame images (processing columns + CRUD-owned fields)
- processing_jobs: Durable image-processing queue

Enums created:
- targetkind: artwork, frame
- processingstatus: pending, ready, failed
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Enum types
target_kind_enum = postgresql.ENUM(
    "artwork",
    "frame",
    name="targetkind",
    create_type=False,
)

processing_status_enum = postgresql.ENUM(
    "pending",
    "ready",
    "failed",
    name="processingstatus",
    create_type=False,
)


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _processing_columns() -> list:
    return [
        sa.Column("processing_status", processing_status_enum, nullable=False, server_default="pending"),
        sa.Column("processing_errors", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("analysis", postgresql.JSONB(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("image_external_id", sa.Text(), nullable=True),
        sa.Column("image_folder", sa.Text(), nullable=True),
        sa.Column("admin_resolution", postgresql.JSONB(), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    # Create enum types
    op.execute("CREATE TYPE targetkind AS ENUM ('artwork', 'frame')")
    op.execute("CREATE TYPE processingstatus AS ENUM ('pending', 'ready', 'failed')")

    # Create artworks table
    op.create_table(
        "artworks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("artist_id", sa.Text(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_processing_columns(),
        *_timestamps(),
    )
    op.create_index("ix_artworks_artist_id", "artworks", ["artist_id"])
    op.create_index("ix_artworks_processing_status", "artworks", ["processing_status"])

    # Create frames table
    op.create_table(
        "frames",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("shop_id", sa.Text(), nullable=True),
        *_processing_columns(),
        *_timestamps(),
    )
    op.create_index("ix_frames_shop_id", "frames", ["shop_id"])
    op.create_index("ix_frames_processing_status", "frames", ["processing_status"])

    # Create processing_jobs table (target_id is not a foreign key)
    op.create_table(
        "processing_jobs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("target_kind", target_kind_enum, nullable=False),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_image", postgresql.JSONB(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("lease_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_processing_jobs_status_created_at", "processing_jobs", ["status", "created_at"])
    op.create_index("ix_processing_jobs_target", "processing_jobs", ["target_kind", "target_id"])


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("processing_jobs")
    op.drop_table("frames")
    op.drop_table("artworks")

    # Drop enum types
    op.execute("DROP TYPE IF EXISTS processingstatus")
    op.execute("DROP TYPE IF EXISTS targetkind")
