"""
Worker Health Server

Small FastAPI app served by the worker process so the platform (Cloud
Run, Kubernetes) can probe it. Served on WORKER_HEALTH_PORT by uvicorn
inside the worker's event loop.

Endpoints:
==========
    GET /health  → WorkerHealthResponse (503 once the loop has stopped)
    GET /live    → {"status": "alive"}
"""

import contextlib
from typing import Iterator

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from intake.config.settings import Settings, settings
from intake.shared.schemas.common import WorkerHealthResponse
from intake.worker.poller import WorkerLoop


def create_health_app(worker: WorkerLoop, config: Settings = settings) -> FastAPI:
    """
    Build the health app for a worker loop.

    Args:
        worker: The loop whose state is reported
        config: Settings (service version)
    """
    app = FastAPI(title=f"{config.APP_NAME} Worker", docs_url=None, redoc_url=None)

    @app.get("/health", response_model=WorkerHealthResponse)
    async def health_check():
        report = worker.health()
        report.version = config.APP_VERSION
        if not report.running:
            return JSONResponse(status_code=503, content=report.model_dump(mode="json"))
        return report

    @app.get("/live")
    async def liveness_check():
        return {"status": "alive"}

    return app


class HealthServer(uvicorn.Server):
    """uvicorn server that leaves SIGINT / SIGTERM to the worker."""

    def install_signal_handlers(self) -> None:
        return None

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


def create_health_server(worker: WorkerLoop, config: Settings = settings) -> HealthServer:
    """uvicorn server for the health app on WORKER_HEALTH_PORT."""
    server_config = uvicorn.Config(
        create_health_app(worker, config),
        host=config.HOST,
        port=config.WORKER_HEALTH_PORT,
        log_level=config.LOG_LEVEL.lower(),
        access_log=False,
        lifespan="off",
    )
    return HealthServer(server_config)
