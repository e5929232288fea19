"""
Frame Entity Model

A picture frame offered by a print shop. Frame images get an extra label
check so that only images that actually show a frame become usable.
"""

from typing import Optional
import uuid

from sqlalchemy import Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from intake.shared.models.base import Base, TimestampMixin
from intake.shared.models.target import TargetMixin


class Frame(Base, TimestampMixin, TargetMixin):
    """
    Frame model - print shop frame image moderated by the intake pipeline.

    Attributes:
        id: Unique identifier (UUID v4)
        name: Frame name shown to buyers
        shop_id: Owning print shop (CRUD layer)
    """

    __tablename__ = "frames"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    shop_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<Frame(id={self.id}, status={self.processing_status})>"
