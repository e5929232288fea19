"""
Intake SQLAlchemy Models

This package contains all database models for the Intake application.

Model Overview:
===============
    ProcessingJob ──(target_kind, target_id)──► Artwork | Frame

- Base: Base class, JSON document type and timestamp mixin
- TargetMixin: Processing columns shared by artworks and frames
- Artwork: Artist submission
- Frame: Print shop frame image
- ProcessingJob: Durable queue entry for one moderation run

Usage:
======
    from intake.shared.models import Artwork, ProcessingJob, JobStatus
"""

from intake.shared.models.base import Base, TimestampMixin, JSONDocument, utcnow
from intake.shared.models.enums import (
    TargetKind,
    JobStatus,
    ProcessingStatus,
    Likelihood,
    ResolutionAction,
    ProcessingErrorCode,
)
from intake.shared.models.target import TargetMixin
from intake.shared.models.artwork import Artwork
from intake.shared.models.frame import Frame
from intake.shared.models.processing_job import ProcessingJob

__all__ = [
    # Base classes and mixins
    "Base",
    "TimestampMixin",
    "TargetMixin",
    "JSONDocument",
    "utcnow",
    # Enums
    "TargetKind",
    "JobStatus",
    "ProcessingStatus",
    "Likelihood",
    "ResolutionAction",
    "ProcessingErrorCode",
    # Models
    "Artwork",
    "Frame",
    "ProcessingJob",
]
