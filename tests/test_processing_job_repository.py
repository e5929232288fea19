import uuid

from intake.shared.db.session import session_scope
from intake.shared.models.enums import JobStatus, TargetKind
from intake.shared.repositories.processing_job_repository import ProcessingJobRepository

from fakes import ARTWORK_URL

SOURCE = {"url": ARTWORK_URL, "external_id": "harbour", "storage_folder": "artworks"}


async def _enqueue(session_factory, count=1, kind=TargetKind.ARTWORK, target_id=None):
    async with session_scope(session_factory) as session:
        repo = ProcessingJobRepository(session)
        return [
            await repo.create_job(kind, target_id or uuid.uuid4(), SOURCE)
            for _ in range(count)
        ]


async def _claim(session_factory, limit=10, lease_seconds=300):
    async with session_scope(session_factory) as session:
        return await ProcessingJobRepository(session).claim_jobs(limit=limit, lease_seconds=lease_seconds)


async def test_create_job_is_pending(session_factory):
    [job] = await _enqueue(session_factory)

    assert job.status == JobStatus.PENDING.value
    assert job.attempts == 0
    assert job.source_image == SOURCE
    assert job.target_kind == TargetKind.ARTWORK
    assert job.lease_expires_at is None


async def test_claim_moves_jobs_to_processing(session_factory):
    await _enqueue(session_factory, count=3)

    claimed = await _claim(session_factory, limit=2)

    assert len(claimed) == 2
    for job in claimed:
        assert job.status == JobStatus.PROCESSING.value
        assert job.attempts == 1
        assert job.started_at is not None
        assert job.lease_expires_at is not None


async def test_claim_is_oldest_first(session_factory):
    jobs = await _enqueue(session_factory, count=3)

    claimed = await _claim(session_factory, limit=1)

    assert [job.id for job in claimed] == [jobs[0].id]


async def test_claimed_jobs_are_not_claimed_again(session_factory):
    await _enqueue(session_factory, count=2)

    first = await _claim(session_factory)
    second = await _claim(session_factory)

    assert len(first) == 2
    assert second == []


async def test_zero_limit_claims_nothing(session_factory):
    await _enqueue(session_factory)

    assert await _claim(session_factory, limit=0) == []


async def test_expired_lease_is_reclaimed(session_factory):
    [job] = await _enqueue(session_factory)

    await _claim(session_factory, lease_seconds=-1)
    reclaimed = await _claim(session_factory)

    assert [j.id for j in reclaimed] == [job.id]
    assert reclaimed[0].attempts == 2


async def test_finished_jobs_are_never_claimed(session_factory):
    done, failed = await _enqueue(session_factory, count=2)
    async with session_scope(session_factory) as session:
        repo = ProcessingJobRepository(session)
        await repo.mark_done(done.id)
        await repo.mark_failed(failed.id, "boom")

    assert await _claim(session_factory) == []


async def test_mark_done_clears_lease(session_factory):
    await _enqueue(session_factory)
    [job] = await _claim(session_factory)

    async with session_scope(session_factory) as session:
        updated = await ProcessingJobRepository(session).mark_done(job.id)

    assert updated.status == JobStatus.DONE.value
    assert updated.finished_at is not None
    assert updated.lease_expires_at is None
    assert updated.error is None


async def test_mark_failed_records_error(session_factory):
    await _enqueue(session_factory)
    [job] = await _claim(session_factory)

    async with session_scope(session_factory) as session:
        updated = await ProcessingJobRepository(session).mark_failed(job.id, "HTTP 404")

    assert updated.status == JobStatus.FAILED.value
    assert updated.error == "HTTP 404"


async def test_mark_failed_without_message_uses_placeholder(session_factory):
    [job] = await _enqueue(session_factory)

    async with session_scope(session_factory) as session:
        updated = await ProcessingJobRepository(session).mark_failed(job.id, "")

    assert updated.error == "unknown error"


async def test_update_missing_job_returns_none(session):
    assert await ProcessingJobRepository(session).mark_done(uuid.uuid4()) is None


async def test_superseded_claim_cannot_finish_job(session_factory):
    [job] = await _enqueue(session_factory)
    [stale] = await _claim(session_factory, lease_seconds=-1)
    [current] = await _claim(session_factory)

    async with session_scope(session_factory) as session:
        repo = ProcessingJobRepository(session)
        assert await repo.mark_done(job.id, attempt=stale.attempts) is None
        assert await repo.mark_failed(job.id, "late failure", attempt=stale.attempts) is None
        still_processing = await repo.get(job.id)
        assert still_processing.status == JobStatus.PROCESSING.value
        assert still_processing.error is None

        updated = await repo.mark_done(job.id, attempt=current.attempts)

    assert (stale.attempts, current.attempts) == (1, 2)
    assert updated.status == JobStatus.DONE.value


async def test_finished_job_ignores_claim_bound_update(session_factory):
    await _enqueue(session_factory)
    [job] = await _claim(session_factory)

    async with session_scope(session_factory) as session:
        repo = ProcessingJobRepository(session)
        await repo.mark_done(job.id, attempt=job.attempts)
        assert await repo.mark_failed(job.id, "late failure", attempt=job.attempts) is None
        assert (await repo.get(job.id)).status == JobStatus.DONE.value


async def test_count_by_status_includes_every_status(session_factory):
    await _enqueue(session_factory, count=3)
    await _claim(session_factory, limit=1)

    async with session_scope(session_factory) as session:
        counts = await ProcessingJobRepository(session).count_by_status()

    assert counts == {"pending": 2, "processing": 1, "done": 0, "failed": 0}


async def test_get_by_target_lists_history(session_factory):
    target_id = uuid.uuid4()
    jobs = await _enqueue(session_factory, count=2, kind=TargetKind.FRAME, target_id=target_id)
    await _enqueue(session_factory, count=1, kind=TargetKind.ARTWORK, target_id=target_id)

    async with session_scope(session_factory) as session:
        history = await ProcessingJobRepository(session).get_by_target(TargetKind.FRAME, target_id)

    assert {job.id for job in history} == {job.id for job in jobs}
