"""
Intake Worker Entry Point

Wires the shared clients, the image pipeline and the polling loop, and
runs them until SIGINT / SIGTERM.

Process Layout:
===============
┌─────────────────────────────────────────────────────────────────────────────┐
│                         INTAKE WORKER                                       │
├─────────────────────────────────────────────────────────────────────────────┤
│   AsyncEngine ── async_sessionmaker ──┐                                     │
│   httpx.AsyncClient ── ImageFetcher ──┼──► ImagePipeline ──► WorkerLoop     │
│   GoogleVisionAdapter ────────────────┘                          │          │
│                                                                  ▼          │
│   HealthServer (uvicorn, WORKER_HEALTH_PORT) ◄──── worker.health()          │
└─────────────────────────────────────────────────────────────────────────────┘

Shutdown:
=========
1. Signal received → WorkerLoop.stop()
2. Loop stops claiming, drains in-flight jobs (grace period)
3. Health server exits, HTTP client and engine are closed

Usage:
======
    intake-worker
    python -m intake.worker.main
"""

import asyncio
import signal

import httpx

from intake.config.settings import Settings, settings
from intake.shared.adapters.image_fetcher import ImageFetcher
from intake.shared.adapters.vision_adapter import GoogleVisionAdapter
from intake.shared.core.logging import logger
from intake.shared.db.session import create_engine, create_session_factory, init_db
from intake.worker.health import create_health_server
from intake.worker.pipelines.image_pipeline import ImagePipeline
from intake.worker.poller import WorkerLoop


async def run_worker(config: Settings = settings) -> None:
    """
    Run the worker until a shutdown signal arrives.

    Args:
        config: Application settings
    """
    logger.info(
        "Starting Intake worker",
        version=config.APP_VERSION,
        environment=config.APP_ENV,
    )

    engine = create_engine(config)
    await init_db(engine)
    session_factory = create_session_factory(engine)

    try:
        async with httpx.AsyncClient(follow_redirects=True) as http_client:
            pipeline = ImagePipeline(
                session_factory=session_factory,
                fetcher=ImageFetcher(
                    http_client,
                    timeout_seconds=config.IMAGE_FETCH_TIMEOUT_SECONDS,
                    max_bytes=config.IMAGE_MAX_BYTES,
                ),
                vision=GoogleVisionAdapter(
                    credentials_file=config.VISION_CREDENTIALS_FILE,
                    timeout_seconds=config.VISION_TIMEOUT_SECONDS,
                ),
                job_timeout_seconds=config.JOB_TIMEOUT_SECONDS,
                label_max_results=config.VISION_LABEL_MAX_RESULTS,
                blur_normalization=config.BLUR_NORMALIZATION,
                color_depth_sample_limit=config.COLOR_DEPTH_SAMPLE_LIMIT,
            )
            worker = WorkerLoop(
                session_factory=session_factory,
                pipeline=pipeline,
                batch_size=config.WORKER_BATCH_SIZE,
                concurrency=config.WORKER_CONCURRENCY,
                idle_sleep_seconds=config.WORKER_IDLE_SLEEP_SECONDS,
                busy_sleep_seconds=config.WORKER_BUSY_SLEEP_SECONDS,
                error_sleep_seconds=config.WORKER_ERROR_SLEEP_SECONDS,
                lease_seconds=config.JOB_LEASE_SECONDS,
                shutdown_grace_seconds=config.WORKER_SHUTDOWN_GRACE_SECONDS,
            )

            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, worker.stop)

            health_server = None
            health_task = None
            if config.WORKER_HEALTH_PORT:
                health_server = create_health_server(worker, config)
                health_task = asyncio.create_task(health_server.serve())
                logger.info("Worker health server listening", port=config.WORKER_HEALTH_PORT)

            try:
                await worker.run()
            finally:
                if health_server is not None:
                    health_server.should_exit = True
                    await health_task
    finally:
        await engine.dispose()
        logger.info("Intake worker stopped")


def main() -> None:
    """Console entry point."""
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
