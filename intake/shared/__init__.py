"""
Shared Module

Contains code shared between API and Worker components:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer
- Services: Business logic and pure image / decision rules
- Schemas: Pydantic request/response models
- Core: Logging, exceptions
- Adapters: Image download and Cloud Vision

Package Structure:
==================
    shared/
    ├── core/           ← Logging, exceptions
    ├── db/             ← Database session management
    ├── models/         ← SQLAlchemy models
    ├── repositories/   ← Data access layer
    ├── services/       ← Business logic
    ├── schemas/        ← Pydantic schemas
    ├── adapters/       ← External services
    └── migrations/     ← Alembic environment and versions

Usage:
======
    from intake.shared.models import Artwork, ProcessingJob
    from intake.shared.repositories import ProcessingJobRepository
    from intake.shared.services import JobService
    from intake.shared.core import logger, IntakeException
"""
