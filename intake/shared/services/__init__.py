"""
Business Logic Services

Services encapsulate business logic and coordinate between repositories,
external services, and domain rules.

Service Pattern:
================
    Handler / Worker → Service → Repository → Database
                          ↘ Pure rules (metrics, decisions)

Services should:
- Contain business logic and validation
- Coordinate multiple repositories if needed
- Leave commit / rollback to the session owner
- NOT handle HTTP concerns (that's for handlers)

Available Services:
===================
- image_metrics: Decode bytes, blur score, color depth (pure)
- decision_engine: Moderation rules and analysis document (pure)
- TargetWriter: Writes verdicts onto artworks / frames
- JobService: Enqueue and inspect processing jobs
- ResolutionService: Admin approve / reject / reprocess

Usage:
======
    from intake.shared.services import JobService, ResolutionService

    service = ResolutionService(db)
    result = await service.resolve(TargetKind.FRAME, frame_id, "reprocess")
"""

from intake.shared.services.decision_engine import Verdict, build_analysis, decide
from intake.shared.services.image_metrics import ImageMetrics, analyze_image_bytes
from intake.shared.services.job_service import JobService
from intake.shared.services.resolution_service import ResolutionResult, ResolutionService
from intake.shared.services.target_writer import TargetWriter

__all__ = [
    "ImageMetrics",
    "analyze_image_bytes",
    "Verdict",
    "decide",
    "build_analysis",
    "TargetWriter",
    "JobService",
    "ResolutionService",
    "ResolutionResult",
]
