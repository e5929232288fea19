"""
Core Module

Provides core functionality shared across the application:
- Structured logging
- Custom exceptions

Usage:
======
    from intake.shared.core.logging import logger, get_logger
    from intake.shared.core.exceptions import IntakeException, NotFoundError

    logger.info("Starting operation", job_id=job_id)
"""

from intake.shared.core.logging import (
    logger,
    get_logger,
    log_context,
    clear_log_context,
)
from intake.shared.core.exceptions import (
    IntakeException,
    NotFoundError,
    TargetNotFoundError,
    JobNotFoundError,
    ValidationError,
    ImageDecodeError,
    ServiceUnavailableError,
    ExternalServiceError,
    ImageFetchError,
    VisionServiceError,
)

__all__ = [
    # Logging
    "logger",
    "get_logger",
    "log_context",
    "clear_log_context",
    # Exceptions
    "IntakeException",
    "NotFoundError",
    "TargetNotFoundError",
    "JobNotFoundError",
    "ValidationError",
    "ImageDecodeError",
    "ServiceUnavailableError",
    "ExternalServiceError",
    "ImageFetchError",
    "VisionServiceError",
]
