"""
Logging Configuration

structlog over the standard library, shared by the API and the worker.

Log Output:
===========
Development:
    2024-01-15 10:30:00 [info     ] Processing job done   job_id=550e8400-... processing_status=ready

Production (JSON, one object per line for Cloud Logging):
    {"timestamp": "2024-01-15T10:30:00Z", "level": "info", "event": "Processing job done", "job_id": "550e8400-..."}

Job Context:
============
The worker runs many jobs as concurrent asyncio tasks. Each handler binds
its job identifiers with log_context(); contextvars keeps the binding
local to that task, so interleaved jobs never mix their fields.

    log_context(job_id=str(job.id), target_kind="frame", target_id=str(job.target_id))
    logger.info("Processing job started")   # carries job_id, target_kind, target_id
    clear_log_context()

Usage:
======
    from intake.shared.core.logging import logger, get_logger

    logger = get_logger(__name__)
    logger.warning("Label detection failed", image_url=url, error=str(e))
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

from intake.config.settings import settings

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3")


def setup_logging() -> None:
    """
    Configure structlog and the root stdlib logger.

    Console rendering in development, JSON elsewhere. Called once when this
    module is first imported.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development:
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Named structlog logger (usually __name__)."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """Bind fields to every log line emitted by the current task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Drop all fields bound with log_context() in the current task."""
    structlog.contextvars.clear_contextvars()


setup_logging()

logger = get_logger("intake")
