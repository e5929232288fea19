"""
Target Mixin

Columns shared by every record the pipeline moderates (artworks and frames).

The CRUD layer owns these rows. The pipeline only ever touches the
processing columns below, plus admin_resolution for admin actions.

SAMPLE ANALYSIS DOCUMENT:
┌──────────────────────────────────────────────────────────────────────────────┐
│ safe_search  │ {"adult": "VERY_UNLIKELY", "violence": "UNLIKELY", ...}       │
│ web_entities │ [{"entity_id": "/m/0jbk", "score": 0.61, "description": ...}] │
│ labels       │ [{"description": "Picture frame", "score": 0.93}] (frames)    │
│ format       │ "jpeg"                                                         │
│ width/height │ 2400 / 1800                                                    │
│ blur_score   │ 3.417                                                          │
│ color_depth  │ 8                                                              │
│ checked_at   │ "2024-01-15T10:30:00+00:00"                                    │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from typing import Any, Optional

from sqlalchemy import Enum as SQLEnum, Text
from sqlalchemy.orm import Mapped, mapped_column

from intake.shared.models.base import JSONDocument
from intake.shared.models.enums import ProcessingStatus


class TargetMixin:
    """
    Processing fields for artwork / frame records.

    Attributes:
        processing_status: pending until a job (or an admin) decides
        processing_errors: Ordered error codes; empty when ready
        analysis: Last analysis document written by the pipeline
        image_url: Currently stored image location (used by reprocess)
        image_external_id: CDN public id of the stored image
        image_folder: CDN folder of the stored image
        admin_resolution: Last admin action {action, resolved_by, resolved_at, note}
    """

    processing_status: Mapped[ProcessingStatus] = mapped_column(
        SQLEnum(
            ProcessingStatus,
            name="processingstatus",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=ProcessingStatus.PENDING,
        index=True,
    )

    processing_errors: Mapped[list[str]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )

    analysis: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=True,
    )

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_external_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_folder: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    admin_resolution: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=True,
    )
