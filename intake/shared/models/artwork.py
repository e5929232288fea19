"""
Artwork Entity Model

An artist's uploaded artwork. Created by the upload flow with
processing_status=pending; the pipeline decides whether it is usable.

SAMPLE ARTWORK RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id                │ 660e8400-e29b-41d4-a716-446655440000                     │
│ title             │ "Evening Harbour"                                         │
│ artist_id         │ "artist-42"                                               │
│ image_url         │ "https://cdn/.../original/harbour.jpg"                   │
│ processing_status │ "ready"                                                   │
│ processing_errors │ []                                                        │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from typing import Optional
import uuid

from sqlalchemy import Boolean, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from intake.shared.models.base import Base, TimestampMixin
from intake.shared.models.target import TargetMixin


class Artwork(Base, TimestampMixin, TargetMixin):
    """
    Artwork model - artist submission moderated by the intake pipeline.

    Attributes:
        id: Unique identifier (UUID v4)
        title: Display title
        description: Artist description
        artist_id: Owner reference (CRUD layer)
        is_available: Listing flag owned by the CRUD layer
    """

    __tablename__ = "artworks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    artist_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Artwork(id={self.id}, status={self.processing_status})>"
