"""
Image processing pipeline.
Handles one claimed job: fetch -> analyze -> decide -> write back.

Pipeline Stages:
1. RESOLVE: Load the target row named by the job
2. SIGNALS + METRICS (concurrently):
   - Vision: SafeSearch, web entities, labels (frames only)
   - Codec: download bytes, decode, blur score, color depth
3. DECISION: Apply moderation rules
4. WRITE: Mark the job done and merge the verdict into the target, in one
   transaction. The job deadline covers stages 1-3 only, so a committed
   verdict is never cancelled halfway

Failure Semantics:
- Any failure (missing target, fetch, decode, SafeSearch, timeout) marks
  the job failed with the error text and leaves the target untouched
- Content-policy hits are NOT failures: the job is done, the target failed
- A handler whose claim was superseded by a reclaim writes nothing
- process() never raises; the worker loop only sees a PipelineResult
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intake.config.settings import settings
from intake.shared.adapters.image_fetcher import ImageFetcher
from intake.shared.adapters.vision_adapter import VisionSignals, VisionSignalsResult, collect_signals
from intake.shared.core.logging import clear_log_context, get_logger, log_context
from intake.shared.db.session import session_scope
from intake.shared.models.enums import ProcessingStatus, TargetKind
from intake.shared.models.processing_job import ProcessingJob
from intake.shared.repositories.processing_job_repository import ProcessingJobRepository
from intake.shared.repositories.target_repository import get_target_repository
from intake.shared.services.decision_engine import Verdict, build_analysis, decide
from intake.shared.services.image_metrics import ImageMetrics, analyze_image_bytes
from intake.shared.services.target_writer import TargetWriter

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Result of processing one job."""

    success: bool
    job_id: UUID
    target_kind: TargetKind
    target_id: UUID
    processing_status: Optional[ProcessingStatus] = None
    processing_errors: list[str] = field(default_factory=list)
    error_message: Optional[str] = None


class ImagePipeline:
    """
    Per-job handler.

    Shared clients (session factory, HTTP fetcher, vision) are injected and
    reused across jobs; each job opens its own sessions.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fetcher: ImageFetcher,
        vision: VisionSignals,
        job_timeout_seconds: float = settings.JOB_TIMEOUT_SECONDS,
        label_max_results: int = settings.VISION_LABEL_MAX_RESULTS,
        blur_normalization: float = settings.BLUR_NORMALIZATION,
        color_depth_sample_limit: int = settings.COLOR_DEPTH_SAMPLE_LIMIT,
    ):
        self.session_factory = session_factory
        self.fetcher = fetcher
        self.vision = vision
        self.job_timeout_seconds = job_timeout_seconds
        self.label_max_results = label_max_results
        self.blur_normalization = blur_normalization
        self.color_depth_sample_limit = color_depth_sample_limit

    async def process(self, job: ProcessingJob) -> PipelineResult:
        """
        Process a claimed job to completion.

        Args:
            job: Job already moved to processing by the claim

        Returns:
            PipelineResult; never raises for job-level failures
        """
        log_context(job_id=str(job.id), target_kind=job.target_kind.value, target_id=str(job.target_id))
        try:
            try:
                outcome = await asyncio.wait_for(self._analyze(job), timeout=self.job_timeout_seconds)
            except asyncio.TimeoutError:
                return await self._fail(job, f"job timed out after {self.job_timeout_seconds}s")
            except Exception as e:
                return await self._fail(job, str(e) or type(e).__name__)

            try:
                return await self._write(job, *outcome)
            except Exception as e:
                return await self._fail(job, str(e) or type(e).__name__)
        finally:
            clear_log_context()

    async def _analyze(self, job: ProcessingJob) -> tuple[Verdict, dict[str, Any], ImageMetrics]:
        """Stages 1-3; runs under the job deadline."""
        logger.info("Processing job started", attempt=job.attempts)

        # Stage 1: Resolve
        async with session_scope(self.session_factory) as session:
            await get_target_repository(job.target_kind, session).get_or_raise(job.target_id)

        image_url = (job.source_image or {}).get("url")
        if not image_url:
            raise ValueError("job has no source image url")

        # Stage 2: Signals + metrics
        signals_task = collect_signals(
            self.vision,
            image_url,
            include_labels=job.target_kind == TargetKind.FRAME,
            label_max_results=self.label_max_results,
        )
        outcomes = await asyncio.gather(
            signals_task,
            self._measure(image_url),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        signals: VisionSignalsResult = outcomes[0]
        metrics: ImageMetrics = outcomes[1]

        # Stage 3: Decision
        verdict = decide(job.target_kind, signals.safe_search, signals.labels)
        analysis = build_analysis(job.target_kind, signals, metrics)
        return verdict, analysis, metrics

    async def _write(
        self,
        job: ProcessingJob,
        verdict: Verdict,
        analysis: dict[str, Any],
        metrics: ImageMetrics,
    ) -> PipelineResult:
        # Stage 4: Write, only while this claim still owns the job
        async with session_scope(self.session_factory) as session:
            if not await ProcessingJobRepository(session).mark_done(job.id, attempt=job.attempts):
                return PipelineResult(
                    success=False,
                    job_id=job.id,
                    target_kind=job.target_kind,
                    target_id=job.target_id,
                    error_message="claim superseded",
                )
            await TargetWriter(session).write_verdict(job.target_kind, job.target_id, analysis, verdict)

        logger.info(
            "Processing job done",
            processing_status=verdict.status.value,
            processing_errors=verdict.errors,
            blur_score=metrics.blur_score,
        )
        return PipelineResult(
            success=True,
            job_id=job.id,
            target_kind=job.target_kind,
            target_id=job.target_id,
            processing_status=verdict.status,
            processing_errors=verdict.errors,
        )

    async def _measure(self, image_url: str) -> ImageMetrics:
        """Download and analyze; decoding runs in a worker thread."""
        data = await self.fetcher.fetch(image_url)
        return await asyncio.to_thread(
            analyze_image_bytes,
            data,
            self.blur_normalization,
            self.color_depth_sample_limit,
        )

    async def _fail(self, job: ProcessingJob, message: str) -> PipelineResult:
        """Record a job failure; the target is left as it was."""
        logger.error("Processing job failed", error=message)
        try:
            async with session_scope(self.session_factory) as session:
                await ProcessingJobRepository(session).mark_failed(job.id, message, attempt=job.attempts)
        except Exception as e:
            # Lease expiry will hand the job to another claim
            logger.error("Could not mark job failed", error=str(e))

        return PipelineResult(
            success=False,
            job_id=job.id,
            target_kind=job.target_kind,
            target_id=job.target_id,
            error_message=message,
        )
