"""
Intake

Image-intake moderation pipeline for artwork and frame uploads.

Package Structure:
==================
    intake/
    ├── api/        ← FastAPI application (enqueue, jobs, admin review)
    ├── worker/     ← Polling worker that processes images
    ├── shared/     ← Shared code (models, services, adapters, etc.)
    └── config/     ← Configuration

Running the Application:
========================
    # API Server
    uvicorn intake.api.main:app --reload

    # Worker
    intake-worker
"""
