import asyncio
import logging
import signal

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskq.db.session import build_engine, build_session_factory, check_connection
from taskq.services.task_store import TaskStore
from taskq.settings import Settings
from taskq.worker.claimer import Claimer
from taskq.worker.dispatcher import Dispatcher
from taskq.worker.loop import WorkerLoop

logger = logging.getLogger(__name__)

def build_worker_loop(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient,
) -> WorkerLoop:
    dispatcher = Dispatcher(
        http_client,
        foo_duration=settings.FOO_DURATION_SECONDS,
        bar_url=settings.BAR_URL,
        execution_timeout=settings.TASK_EXECUTION_TIMEOUT_SECONDS,
    )
    return WorkerLoop(
        claimer=Claimer(session_factory),
        dispatcher=dispatcher,
        store=TaskStore(session_factory),
        idle_interval=settings.WORKER_IDLE_INTERVAL_SECONDS,
        error_backoff=settings.WORKER_ERROR_BACKOFF_SECONDS,
    )

async def run_worker(settings: Settings):
    """
    Standalone worker process: no HTTP API, just the claim loop.
    Raises if the database is unreachable at startup.
    """
    engine = build_engine(settings)
    try:
        await check_connection(engine)
        session_factory = build_session_factory(engine)

        async with httpx.AsyncClient(timeout=settings.BAR_TIMEOUT_SECONDS) as http_client:
            worker = build_worker_loop(settings, session_factory, http_client)

            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.add_signal_handler(sig, worker.stop)
                except NotImplementedError:
                    # Windows support
                    pass

            await worker.run()
    finally:
        await engine.dispose()
