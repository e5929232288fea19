"""
Enums used across the application.
"""

from enum import Enum


class TargetKind(str, Enum):
    """Which collection a job's target lives in (and which rules apply)."""

    ARTWORK = "artwork"
    FRAME = "frame"


class JobStatus(str, Enum):
    """
    Processing job lifecycle.

    pending ──claim──► processing ──► done
                            └───────► failed
    """

    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class ProcessingStatus(str, Enum):
    """Moderation state of an artwork or frame record."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class Likelihood(str, Enum):
    """
    Cloud Vision likelihood scale, lowest to highest.

    Member names match the Cloud Vision enum names so values can be mapped
    by name.
    """

    UNKNOWN = "UNKNOWN"
    VERY_UNLIKELY = "VERY_UNLIKELY"
    UNLIKELY = "UNLIKELY"
    POSSIBLE = "POSSIBLE"
    LIKELY = "LIKELY"
    VERY_LIKELY = "VERY_LIKELY"

    @property
    def is_likely(self) -> bool:
        """True for LIKELY and VERY_LIKELY."""
        return self in (Likelihood.LIKELY, Likelihood.VERY_LIKELY)


class ResolutionAction(str, Enum):
    """Admin actions against a target."""

    APPROVE = "approve"
    REJECT = "reject"
    REPROCESS = "reprocess"


class ProcessingErrorCode(str, Enum):
    """Error codes recorded on a target's processing_errors."""

    NSFW_ADULT = "nsfw_adult"
    NSFW_VIOLENCE = "nsfw_violence"
    NOT_A_FRAME = "not_a_frame"
    REJECTED_BY_ADMIN = "rejected_by_admin"
