"""
Shared fixtures.

Database tests run against a file-backed SQLite database (aiosqlite) so
several sessions can be open at once, as they are in the worker.
"""

from typing import Any, Callable
import uuid

import httpx
import pytest
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine

from intake.shared.adapters.image_fetcher import ImageFetcher
from intake.shared.db.session import create_session_factory, session_scope
from intake.shared.models import Artwork, Base, Frame, ProcessingJob, TargetKind
from intake.shared.repositories.processing_job_repository import ProcessingJobRepository

from fakes import ARTWORK_URL, FRAME_URL
from imaging import encode, noise_image


# ═══════════════════════════════════════════════════════════════════════════════
# IMAGES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def sharp_png() -> bytes:
    return encode(noise_image(), "PNG")


@pytest.fixture
def sharp_jpeg() -> bytes:
    return encode(noise_image(seed=11), "JPEG")


@pytest.fixture
def flat_png() -> bytes:
    return encode(Image.new("RGB", (32, 32), (120, 80, 40)), "PNG")


# ═══════════════════════════════════════════════════════════════════════════════
# DATABASE
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'intake.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def create_artwork(session_factory) -> Callable:
    async def _create(**fields: Any) -> uuid.UUID:
        values = {"title": "Evening Harbour", "artist_id": "artist-42", "image_url": ARTWORK_URL}
        values.update(fields)
        async with session_scope(session_factory) as session:
            artwork = Artwork(**values)
            session.add(artwork)
            await session.flush()
            return artwork.id

    return _create


@pytest.fixture
def create_frame(session_factory) -> Callable:
    async def _create(**fields: Any) -> uuid.UUID:
        values = {"name": "Oak 30x40", "shop_id": "shop-7", "image_url": FRAME_URL}
        values.update(fields)
        async with session_scope(session_factory) as session:
            frame = Frame(**values)
            session.add(frame)
            await session.flush()
            return frame.id

    return _create


@pytest.fixture
def claimed_job(session_factory) -> Callable:
    """Enqueue a job and claim it, returning the claimed ProcessingJob."""

    async def _claim(kind: TargetKind, target_id: uuid.UUID, url: str) -> ProcessingJob:
        async with session_scope(session_factory) as session:
            await ProcessingJobRepository(session).create_job(
                kind, target_id, {"url": url, "external_id": None, "storage_folder": None}
            )
        async with session_scope(session_factory) as session:
            jobs = await ProcessingJobRepository(session).claim_jobs(limit=1, lease_seconds=300)
        assert len(jobs) == 1
        return jobs[0]

    return _claim


# ═══════════════════════════════════════════════════════════════════════════════
# EXTERNAL SERVICES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
async def make_fetcher():
    """Build an ImageFetcher over httpx.MockTransport from a url → bytes map."""
    clients: list[httpx.AsyncClient] = []

    def _make(routes: dict[str, bytes], max_bytes: int = 10 * 1024 * 1024) -> ImageFetcher:
        def handler(request: httpx.Request) -> httpx.Response:
            body = routes.get(str(request.url))
            if body is None:
                return httpx.Response(404)
            return httpx.Response(200, content=body)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return ImageFetcher(client, timeout_seconds=5, max_bytes=max_bytes)

    yield _make

    for client in clients:
        await client.aclose()
