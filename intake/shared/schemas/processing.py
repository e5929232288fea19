"""
Processing Schemas

Request / response models for enqueueing jobs, reading job and target
state, and admin resolution.

Enqueue Payload:
================
Upload handlers post the reference of exactly one target plus the stored
image. The legacy CDN shape is accepted as well:

    {"artworkId": "...", "sourceImage": {"url": "...", "externalId": "...", "storageFolder": "..."}}
    {"frameId": "...", "cloudinary": {"secureUrl": "...", "publicId": "...", "folder": "..."}}
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from intake.shared.models.enums import (
    JobStatus,
    ProcessingStatus,
    ResolutionAction,
    TargetKind,
)
from intake.shared.schemas.common import BaseSchema


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE IMAGE
# ═══════════════════════════════════════════════════════════════════════════════


class SourceImage(BaseSchema):
    """Location of the stored image bytes."""

    url: str = Field(min_length=1, description="Public URL of the stored image")
    external_id: Optional[str] = Field(default=None, alias="externalId")
    storage_folder: Optional[str] = Field(default=None, alias="storageFolder")

    def to_document(self) -> dict[str, Any]:
        """Shape stored on ProcessingJob.source_image."""
        return {
            "url": self.url,
            "external_id": self.external_id,
            "storage_folder": self.storage_folder,
        }


class CloudinaryReference(BaseModel):
    """Legacy CDN reference sent by older upload handlers."""

    model_config = ConfigDict(populate_by_name=True)

    secure_url: str = Field(min_length=1, alias="secureUrl")
    public_id: Optional[str] = Field(default=None, alias="publicId")
    folder: Optional[str] = None

    def to_source_image(self) -> SourceImage:
        return SourceImage(
            url=self.secure_url,
            external_id=self.public_id,
            storage_folder=self.folder,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# ENQUEUE
# ═══════════════════════════════════════════════════════════════════════════════


class EnqueueRequest(BaseModel):
    """
    Upload-handler enqueue payload.

    Exactly one of artwork_id / frame_id, and one of source_image /
    cloudinary, must be provided. Other upload fields are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    artwork_id: Optional[UUID] = Field(default=None, alias="artworkId")
    frame_id: Optional[UUID] = Field(default=None, alias="frameId")
    source_image: Optional[SourceImage] = Field(default=None, alias="sourceImage")
    cloudinary: Optional[CloudinaryReference] = None

    @model_validator(mode="after")
    def check_references(self) -> "EnqueueRequest":
        if (self.artwork_id is None) == (self.frame_id is None):
            raise ValueError("exactly one of artworkId or frameId is required")
        if self.source_image is None and self.cloudinary is None:
            raise ValueError("sourceImage is required")
        return self

    @property
    def target_kind(self) -> TargetKind:
        return TargetKind.ARTWORK if self.artwork_id is not None else TargetKind.FRAME

    @property
    def target_id(self) -> UUID:
        return self.artwork_id if self.artwork_id is not None else self.frame_id

    @property
    def image(self) -> SourceImage:
        """The image reference, preferring sourceImage over the legacy shape."""
        if self.source_image is not None:
            return self.source_image
        return self.cloudinary.to_source_image()


# ═══════════════════════════════════════════════════════════════════════════════
# JOB RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class JobResponse(BaseSchema):
    """Processing job state."""

    id: UUID
    target_kind: TargetKind
    target_id: UUID
    source_image: dict[str, Any]
    status: JobStatus
    attempts: int
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    lease_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class JobListResponse(BaseModel):
    """Jobs for one target, newest first."""

    items: list[JobResponse]
    total: int


# ═══════════════════════════════════════════════════════════════════════════════
# TARGET RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class TargetStatusResponse(BaseSchema):
    """Processing view of an artwork or frame."""

    id: UUID
    target_kind: TargetKind
    processing_status: ProcessingStatus
    processing_errors: list[str] = Field(default_factory=list)
    analysis: Optional[dict[str, Any]] = None
    image_url: Optional[str] = None
    admin_resolution: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_target(cls, kind: TargetKind, target: Any) -> "TargetStatusResponse":
        """Build from an Artwork / Frame row."""
        return cls(
            id=target.id,
            target_kind=kind,
            processing_status=target.processing_status,
            processing_errors=target.processing_errors or [],
            analysis=target.analysis,
            image_url=target.image_url,
            admin_resolution=target.admin_resolution,
            created_at=target.created_at,
            updated_at=target.updated_at,
        )


class TargetListResponse(BaseModel):
    """Admin target listing."""

    items: list[TargetStatusResponse]
    count: int


# ═══════════════════════════════════════════════════════════════════════════════
# ADMIN RESOLUTION
# ═══════════════════════════════════════════════════════════════════════════════


class ResolutionRequest(BaseModel):
    """Admin decision for one target."""

    model_config = ConfigDict(populate_by_name=True)

    action: ResolutionAction
    note: Optional[str] = Field(default=None, max_length=2000)
    resolved_by: Optional[str] = Field(default=None, alias="resolvedBy")


class ResolutionResponse(BaseModel):
    """Target state after the action, plus the new job for reprocess."""

    target: TargetStatusResponse
    job: Optional[JobResponse] = None
