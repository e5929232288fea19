import asyncio
import uuid

import pytest

from intake.shared.adapters.vision_adapter import Label, SafeSearchResult, WebEntity
from intake.shared.db.session import session_scope
from intake.shared.models import Artwork, Frame, ProcessingJob
from intake.shared.models.enums import JobStatus, Likelihood, ProcessingStatus, TargetKind
from intake.shared.services.target_writer import TargetWriter
from intake.worker.pipelines.image_pipeline import ImagePipeline

from fakes import ARTWORK_URL, FRAME_URL, FakeVision


@pytest.fixture
def make_pipeline(session_factory, make_fetcher, sharp_png, sharp_jpeg):
    def _make(vision=None, routes=None, **options):
        if routes is None:
            routes = {ARTWORK_URL: sharp_png, FRAME_URL: sharp_jpeg}
        return ImagePipeline(
            session_factory=session_factory,
            fetcher=make_fetcher(routes),
            vision=vision or FakeVision(),
            **options,
        )

    return _make


async def _load(session_factory, model, record_id):
    async with session_scope(session_factory) as session:
        return await session.get(model, record_id)


async def test_safe_artwork_becomes_ready(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    vision = FakeVision(
        safe_search=SafeSearchResult(adult=Likelihood.VERY_UNLIKELY, violence=Likelihood.UNLIKELY),
        web_entities=[WebEntity("/m/05qdh", 0.7, "Painting")],
    )

    result = await make_pipeline(vision).process(job)

    assert result.success
    assert result.processing_status == ProcessingStatus.READY
    artwork = await _load(session_factory, Artwork, artwork_id)
    assert artwork.processing_status == ProcessingStatus.READY
    assert artwork.processing_errors == []
    assert artwork.analysis["format"] == "png"
    assert (artwork.analysis["width"], artwork.analysis["height"]) == (64, 48)
    assert artwork.analysis["blur_score"] > 0.05
    assert artwork.analysis["color_depth"] == 16
    assert artwork.analysis["safe_search"]["adult"] == "VERY_UNLIKELY"
    assert artwork.analysis["web_entities"][0]["description"] == "Painting"
    assert "labels" not in artwork.analysis
    assert artwork.title == "Evening Harbour"
    done = await _load(session_factory, ProcessingJob, job.id)
    assert done.status == JobStatus.DONE.value
    assert done.error is None
    assert ("labels", ARTWORK_URL) not in vision.calls


async def test_adult_artwork_fails_with_job_done(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    vision = FakeVision(safe_search=SafeSearchResult(adult=Likelihood.VERY_LIKELY))

    result = await make_pipeline(vision).process(job)

    assert result.success
    artwork = await _load(session_factory, Artwork, artwork_id)
    assert artwork.processing_status == ProcessingStatus.FAILED
    assert artwork.processing_errors == ["nsfw_adult"]
    assert (await _load(session_factory, ProcessingJob, job.id)).status == JobStatus.DONE.value


async def test_frame_with_frame_label_is_ready(session_factory, make_pipeline, create_frame, claimed_job):
    frame_id = await create_frame()
    job = await claimed_job(TargetKind.FRAME, frame_id, FRAME_URL)
    vision = FakeVision(labels=[Label("Wood", 0.95), Label("Picture frame", 0.9)])

    await make_pipeline(vision).process(job)

    frame = await _load(session_factory, Frame, frame_id)
    assert frame.processing_status == ProcessingStatus.READY
    assert frame.analysis["format"] == "jpeg"
    assert frame.analysis["labels"] == [
        {"description": "Wood", "score": 0.95},
        {"description": "Picture frame", "score": 0.9},
    ]


async def test_frame_without_frame_label_fails(session_factory, make_pipeline, create_frame, claimed_job):
    frame_id = await create_frame()
    job = await claimed_job(TargetKind.FRAME, frame_id, FRAME_URL)

    await make_pipeline(FakeVision(labels=[Label("Cat", 0.98)])).process(job)

    frame = await _load(session_factory, Frame, frame_id)
    assert frame.processing_status == ProcessingStatus.FAILED
    assert frame.processing_errors == ["not_a_frame"]


async def test_label_failure_counts_as_not_a_frame(session_factory, make_pipeline, create_frame, claimed_job):
    frame_id = await create_frame()
    job = await claimed_job(TargetKind.FRAME, frame_id, FRAME_URL)

    result = await make_pipeline(FakeVision(fail_labels=True)).process(job)

    assert result.success
    frame = await _load(session_factory, Frame, frame_id)
    assert frame.processing_errors == ["not_a_frame"]
    assert frame.analysis["labels"] == []


async def test_web_detection_failure_is_tolerated(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)

    result = await make_pipeline(FakeVision(fail_web=True)).process(job)

    assert result.success
    artwork = await _load(session_factory, Artwork, artwork_id)
    assert artwork.analysis["web_entities"] == []
    assert (await _load(session_factory, ProcessingJob, job.id)).status == JobStatus.DONE.value


async def test_fetch_failure_fails_job_and_leaves_target(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)

    result = await make_pipeline(routes={}).process(job)

    assert not result.success
    assert "HTTP 404" in result.error_message
    failed = await _load(session_factory, ProcessingJob, job.id)
    assert failed.status == JobStatus.FAILED.value
    assert "HTTP 404" in failed.error
    artwork = await _load(session_factory, Artwork, artwork_id)
    assert artwork.processing_status == ProcessingStatus.PENDING
    assert artwork.analysis is None


async def test_undecodable_image_fails_job(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)

    result = await make_pipeline(routes={ARTWORK_URL: b"<html>not an image</html>"}).process(job)

    assert not result.success
    assert (await _load(session_factory, ProcessingJob, job.id)).status == JobStatus.FAILED.value
    assert (await _load(session_factory, Artwork, artwork_id)).analysis is None


async def test_safe_search_failure_fails_job(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)

    result = await make_pipeline(FakeVision(fail_safety=True)).process(job)

    assert not result.success
    failed = await _load(session_factory, ProcessingJob, job.id)
    assert "quota exceeded" in failed.error
    assert (await _load(session_factory, Artwork, artwork_id)).processing_status == ProcessingStatus.PENDING


async def test_missing_target_fails_job(session_factory, make_pipeline, claimed_job):
    job = await claimed_job(TargetKind.FRAME, uuid.uuid4(), FRAME_URL)
    vision = FakeVision()

    result = await make_pipeline(vision).process(job)

    assert not result.success
    assert "not found" in result.error_message
    assert vision.calls == []
    assert (await _load(session_factory, ProcessingJob, job.id)).status == JobStatus.FAILED.value


async def test_slow_job_times_out(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)

    result = await make_pipeline(FakeVision(delay=1.0), job_timeout_seconds=0.05).process(job)

    assert not result.success
    assert result.error_message == "job timed out after 0.05s"
    failed = await _load(session_factory, ProcessingJob, job.id)
    assert failed.status == JobStatus.FAILED.value
    assert (await _load(session_factory, Artwork, artwork_id)).processing_status == ProcessingStatus.PENDING


async def test_deadline_does_not_cancel_verdict_write(
    monkeypatch, session_factory, make_pipeline, create_artwork, claimed_job
):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    write_verdict = TargetWriter.write_verdict

    async def slow_write_verdict(self, *args, **kwargs):
        await asyncio.sleep(0.6)
        return await write_verdict(self, *args, **kwargs)

    monkeypatch.setattr(TargetWriter, "write_verdict", slow_write_verdict)

    result = await make_pipeline(job_timeout_seconds=0.3).process(job)

    assert result.success
    assert (await _load(session_factory, ProcessingJob, job.id)).status == JobStatus.DONE.value
    assert (await _load(session_factory, Artwork, artwork_id)).processing_status == ProcessingStatus.READY


async def _reclaim_behind(session_factory, job):
    """Simulate another worker reclaiming the job after its lease expired."""
    async with session_scope(session_factory) as session:
        row = await session.get(ProcessingJob, job.id)
        row.attempts += 1


async def test_superseded_claim_writes_nothing(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    await _reclaim_behind(session_factory, job)

    result = await make_pipeline().process(job)

    assert not result.success
    assert result.error_message == "claim superseded"
    current = await _load(session_factory, ProcessingJob, job.id)
    assert current.status == JobStatus.PROCESSING.value
    assert current.attempts == 2
    artwork = await _load(session_factory, Artwork, artwork_id)
    assert artwork.processing_status == ProcessingStatus.PENDING
    assert artwork.analysis is None


async def test_superseded_claim_cannot_fail_job(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    job = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    await _reclaim_behind(session_factory, job)

    result = await make_pipeline(routes={}).process(job)

    assert not result.success
    current = await _load(session_factory, ProcessingJob, job.id)
    assert current.status == JobStatus.PROCESSING.value
    assert current.error is None


async def test_reprocessing_overwrites_previous_verdict(session_factory, make_pipeline, create_artwork, claimed_job):
    artwork_id = await create_artwork()
    first = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    await make_pipeline(FakeVision(safe_search=SafeSearchResult(violence=Likelihood.LIKELY))).process(first)

    second = await claimed_job(TargetKind.ARTWORK, artwork_id, ARTWORK_URL)
    await make_pipeline(FakeVision()).process(second)

    artwork = await _load(session_factory, Artwork, artwork_id)
    assert artwork.processing_status == ProcessingStatus.READY
    assert artwork.processing_errors == []
