"""
Database Module

This module provides database connectivity and session management for Intake.

Architecture Overview:
======================
┌─────────────────────────────────────────────────────────────────────────────┐
│                        DATABASE LAYER                                       │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                             │
│   FastAPI Route                      Worker (ImagePipeline / WorkerLoop)    │
│       │ get_db()                         │ session_scope(factory)           │
│       ▼                                  ▼                                  │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │              AsyncSession                                   │          │
│   │  - Commit on success, rollback on exception                 │          │
│   └─────────────────────────────────────────────────────────────┘          │
│       │                                                                     │
│       ▼                                                                     │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │  Repositories: ProcessingJobRepository,                     │          │
│   │                ArtworkRepository, FrameRepository           │          │
│   └─────────────────────────────────────────────────────────────┘          │
│       │                                                                     │
│       ▼                                                                     │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │              PostgreSQL Database                            │          │
│   └─────────────────────────────────────────────────────────────┘          │
│                                                                             │
└─────────────────────────────────────────────────────────────────────────────┘

Usage:
======
    from intake.shared.db import session_scope, get_session_factory

    async with session_scope(get_session_factory()) as session:
        ...
"""

from intake.shared.db.session import (
    get_db,
    init_db,
    close_db,
    create_engine,
    create_session_factory,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "get_db",  # FastAPI dependency for getting a database session
    "init_db",  # Verify connectivity on startup
    "close_db",  # Dispose engine on shutdown
    "create_engine",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "session_scope",  # Transactional scope for worker code
]
