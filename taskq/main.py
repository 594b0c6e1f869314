import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from taskq.api.v1.metrics import router as metrics_router
from taskq.api.v1.tasks import router as tasks_router
from taskq.db.session import build_engine, build_session_factory, check_connection
from taskq.domain.errors import ConfigurationError, TaskNotFoundError
from taskq.logging_setup import configure_logging
from taskq.services.task_store import TaskStore
from taskq.settings import Settings, load_settings
from taskq.worker.runner import build_worker_loop, run_worker

logger = logging.getLogger(__name__)

ROLES = ("all", "api", "worker")

def create_app(settings: Settings, engine: Optional[AsyncEngine] = None, run_worker_loop: Optional[bool] = None) -> FastAPI:
    """
    Builds the control-plane app. The engine (and its pool) is created here,
    not at import time, so tests can hand in their own.

    With run_worker_loop (defaults to settings.WORKER_ENABLED) a worker loop
    runs inside the API process for the lifetime of the app.
    """
    if engine is None:
        engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    embed_worker = settings.WORKER_ENABLED if run_worker_loop is None else run_worker_loop

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: an unreachable database is fatal
        await check_connection(engine)

        http_client = None
        worker = None
        if embed_worker:
            http_client = httpx.AsyncClient(timeout=settings.BAR_TIMEOUT_SECONDS)
            worker = build_worker_loop(settings, session_factory, http_client)
            await worker.start()

        yield

        # Shutdown
        if worker:
            await worker.shutdown()
            await http_client.aclose()
        await engine.dispose()

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.task_store = TaskStore(session_factory)

    app.include_router(tasks_router, prefix="/v1/task", tags=["tasks"])
    app.include_router(metrics_router, tags=["metrics"])

    @app.exception_handler(TaskNotFoundError)
    async def task_not_found(request: Request, exc: TaskNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    @app.exception_handler(OSError)
    async def store_fault(request: Request, exc: Exception):
        # Logged here with detail, opaque to the caller
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="taskq", description="Task queue API and worker")
    parser.add_argument(
        "--role",
        choices=ROLES,
        default="all",
        help="all: API with an embedded worker; api: API only; worker: worker loop only",
    )
    parser.add_argument("--host", default=None, help="Overrides the host part of LISTEN_ADDR")
    parser.add_argument("--port", type=int, default=None, help="Overrides the port part of LISTEN_ADDR")
    return parser.parse_args(argv)

def run(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings()
        host = args.host or settings.listen_host
        port = args.port if args.port is not None else settings.listen_port
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Reading configuration from environment: {e}")
        return 1

    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Starting taskq (role={args.role})")

    try:
        if args.role == "worker":
            asyncio.run(run_worker(settings))
        else:
            app = create_app(settings, run_worker_loop=(args.role == "all") and settings.WORKER_ENABLED)
            uvicorn.run(app, host=host, port=port)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Initializing database connection: {e}")
        return 1
    return 0

def main() -> None:
    sys.exit(run())

if __name__ == "__main__":
    main()
