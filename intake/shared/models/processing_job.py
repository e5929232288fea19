"""
ProcessingJob Entity Model

One unit of pipeline work: binds an artwork or frame to the source image
that must be analyzed.

Jobs are append-only. A reprocess request adds a new row rather than
resetting an old one, so several jobs may reference the same target.

SAMPLE PROCESSING_JOB RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ 550e8400-e29b-41d4-a716-446655440000                      │
│ target_kind      │ "artwork"                                                  │
│ target_id        │ 660e8400-e29b-41d4-a716-446655440000                      │
│ source_image     │ {"url": "https://cdn/.../a.jpg", "external_id": "a", ...}  │
│ status           │ "done"                                                     │
│ attempts         │ 1                                                          │
│ error            │ null                                                       │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from datetime import datetime
from typing import Any, Optional
import uuid

from sqlalchemy import Enum as SQLEnum, Index, Integer, Text, Uuid, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from intake.shared.models.base import Base, JSONDocument, TimestampMixin
from intake.shared.models.enums import JobStatus, TargetKind


class ProcessingJob(Base, TimestampMixin):
    """
    ProcessingJob model - tracks one moderation run for a target.

    Attributes:
        id: Unique identifier (UUID v4), assigned at enqueue time
        target_kind: artwork or frame
        target_id: The artwork / frame being processed
        source_image: {url, external_id, storage_folder}; immutable once set
        status: Current job status (JobStatus value)
        started_at: When the current claim started
        finished_at: When the job reached done/failed
        lease_expires_at: Claim deadline while processing
        attempts: Number of times the job has been claimed
        error: Diagnostic text, set only when failed
    """

    __tablename__ = "processing_jobs"
    __table_args__ = (
        Index("ix_processing_jobs_status_created_at", "status", "created_at"),
        Index("ix_processing_jobs_target", "target_kind", "target_id"),
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # PRIMARY KEY
    # ═══════════════════════════════════════════════════════════════════════════

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # TARGET REFERENCE
    # ═══════════════════════════════════════════════════════════════════════════

    target_kind: Mapped[TargetKind] = mapped_column(
        SQLEnum(
            TargetKind,
            name="targetkind",
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
    )

    # Not a foreign key: the target may be deleted while a job is queued
    target_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
    )

    source_image: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # JOB STATE
    # ═══════════════════════════════════════════════════════════════════════════

    status: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=JobStatus.PENDING.value,
    )

    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    finished_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    lease_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    error: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<ProcessingJob(id={self.id}, target={self.target_kind}:{self.target_id}, "
            f"status={self.status})>"
        )
