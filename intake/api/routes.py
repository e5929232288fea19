"""
Route Registration

Centralizes all route registration for the FastAPI application.

Route Hierarchy:
================
    /health, /ready, /live   → Health check endpoints
    /jobs                    → Enqueue and inspect processing jobs
    /admin/targets           → Moderation review and resolution

Usage:
======
    from intake.api.routes import register_routes

    app = FastAPI()
    register_routes(app)
"""

from fastapi import FastAPI

from intake.api.handlers import (
    admin_handler,
    health_handler,
    job_handler,
)
from intake.shared.schemas.common import ErrorResponse

# Error shapes produced by the exception handlers
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    404: {"model": ErrorResponse, "description": "Job or target not found"},
}


def register_routes(app: FastAPI) -> None:
    """
    Register all API routes.

    Args:
        app: FastAPI application instance
    """
    # Health check endpoints (no prefix, root level)
    app.include_router(
        health_handler.router,
        tags=["Health"],
    )

    # Processing jobs
    app.include_router(
        job_handler.router,
        prefix="/jobs",
        tags=["Jobs"],
        responses=ERROR_RESPONSES,
    )

    # Admin moderation
    app.include_router(
        admin_handler.router,
        prefix="/admin/targets",
        tags=["Admin"],
        responses=ERROR_RESPONSES,
    )
