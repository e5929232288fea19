"""
Custom Exceptions

Application-specific exceptions with HTTP status codes and error codes.

Exception Hierarchy:
====================
    IntakeException (base)
       │
       ├── NotFoundError (404)             ← Resource not found
       │      ├── TargetNotFoundError      ← Artwork / frame row missing
       │      └── JobNotFoundError
       ├── ValidationError (400)           ← Invalid input data
       ├── ImageDecodeError (422)          ← Bytes are not a JPEG/PNG we can read
       └── ServiceUnavailableError (503)   ← External service down
              └── ExternalServiceError
                     ├── ImageFetchError   ← CDN download failed
                     └── VisionServiceError

Usage:
======
    from intake.shared.core.exceptions import TargetNotFoundError, ImageFetchError

    raise TargetNotFoundError("artwork", artwork_id)
    # Results in: {"error": {"code": "NOT_FOUND", "message": "Artwork with id 'abc' not found"}}

    raise ImageFetchError(url, "HTTP 404")

Worker Semantics:
=================
Inside the worker every exception is recorded on the job row (job → failed)
and never leaves the handler. The HTTP status codes only matter for the
admin/job API, where the error handler middleware converts them to JSON:
    {
        "error": {
            "code": "NOT_FOUND",
            "message": "Frame with id 'abc-123' not found",
            "details": {}
        }
    }
"""

from typing import Any, Optional


class IntakeException(Exception):
    """
    Base exception for all Intake application errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (default 500)
        error_code: Machine-readable error code
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dictionary with error details for JSON response
        """
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# ═══════════════════════════════════════════════════════════════════════════════
# NOT FOUND ERRORS (404)
# ═══════════════════════════════════════════════════════════════════════════════


class NotFoundError(IntakeException):
    """
    Resource not found error (404 Not Found).

    Example:
        raise NotFoundError("Job", job_id)
        # Message: "Job with id 'abc-123' not found"
    """

    def __init__(
        self,
        resource: str,
        resource_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class TargetNotFoundError(NotFoundError):
    """Artwork or frame record not found."""

    def __init__(self, target_kind: str, target_id: Any) -> None:
        super().__init__(
            resource=str(target_kind).capitalize(),
            resource_id=str(target_id),
            details={"target_kind": str(target_kind)},
        )


class JobNotFoundError(NotFoundError):
    """Processing job not found."""

    def __init__(self, job_id: Any) -> None:
        super().__init__(resource="Job", resource_id=str(job_id))


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION & DECODE ERRORS (400, 422)
# ═══════════════════════════════════════════════════════════════════════════════


class ValidationError(IntakeException):
    """
    Validation error (400 Bad Request).

    Raised when input data fails validation.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class ImageDecodeError(IntakeException):
    """
    Image bytes could not be decoded by any supported codec.

    Fails the job; the target keeps its previous processing status.
    """

    def __init__(
        self,
        message: str = "Unable to decode image",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_code="IMAGE_DECODE_ERROR",
            details=details,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICE ERRORS (503)
# ═══════════════════════════════════════════════════════════════════════════════


class ServiceUnavailableError(IntakeException):
    """
    Service temporarily unavailable error (503).
    """

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            details=details,
        )


class ExternalServiceError(ServiceUnavailableError):
    """
    External service error.

    More specific error for external API failures.
    """

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        msg = message or f"{service_name} service error"
        extra_details = details or {}
        extra_details["service"] = service_name
        super().__init__(message=msg, details=extra_details)


class ImageFetchError(ExternalServiceError):
    """Downloading the source image failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(
            service_name="image_store",
            message=f"Failed to fetch image {url}: {reason}",
            details={"url": url},
        )


class VisionServiceError(ExternalServiceError):
    """A Cloud Vision call failed or returned an error payload."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            service_name="vision",
            message=f"Vision {operation} failed: {reason}",
            details={"operation": operation},
        )
