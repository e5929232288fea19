"""
API Handlers

Route handlers for the Intake API.

Handlers follow the pattern:
- Parse HTTP requests
- Call service methods
- Format HTTP responses

All business logic is delegated to the service layer.
"""

from intake.api.handlers import (
    admin_handler,
    health_handler,
    job_handler,
)

__all__ = [
    "admin_handler",
    "health_handler",
    "job_handler",
]
