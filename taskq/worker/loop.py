import asyncio
import logging
from typing import Optional

from taskq.api.v1.metrics import TASKS_FINISHED, WORKER_ERRORS, WORKER_IDLE_POLLS
from taskq.services.task_store import TaskStore
from taskq.worker.claimer import Claimer
from taskq.worker.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

class WorkerLoop:
    """
    Claim -> dispatch -> record, forever.

    - Task claimed: run it, record its terminal state, go again immediately.
    - Nothing eligible: sleep `idle_interval`.
    - Store fault while claiming or recording: log, sleep `error_backoff`.

    One task at a time; scale out by running more worker processes.
    A task left ACTIVE by a crashed worker is never picked up again.
    """

    def __init__(
        self,
        claimer: Claimer,
        dispatcher: Dispatcher,
        store: TaskStore,
        idle_interval: float = 10.0,
        error_backoff: float = 30.0,
    ):
        self.claimer = claimer
        self.dispatcher = dispatcher
        self.store = store
        self.idle_interval = idle_interval
        self.error_backoff = error_backoff
        self.running = False
        self._shutdown_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> bool:
        """
        Attempts to run a single task.

        Returns True if a task was run, False if there was nothing to run.
        Raises if the store failed while claiming or recording the result.
        """
        claimed = await self.claimer.claim()
        if claimed is None:
            return False

        state = await self.dispatcher.dispatch(claimed.type, claimed.id)

        recorded = await self.store.set_state(claimed.id, state)
        if recorded:
            logger.info(f"Task {claimed.id} finished with state {state}")
        else:
            logger.warning(f"Task {claimed.id} was deleted before its state ({state}) could be recorded")
        TASKS_FINISHED.labels(type=claimed.type, state=state).inc()
        return True

    async def run(self):
        self._reset()
        await self._run_loop()

    async def _run_loop(self):
        logger.info("Worker loop started")

        try:
            while self.running:
                try:
                    did_work = await self.run_once()
                except Exception as e:
                    WORKER_ERRORS.inc()
                    logger.error(f"Failed to run task: {e}", exc_info=True)
                    await self._sleep(self.error_backoff)
                    continue

                if not did_work:
                    WORKER_IDLE_POLLS.inc()
                    await self._sleep(self.idle_interval)
        finally:
            logger.info("Worker loop stopped")

    def stop(self):
        """Stops the loop at its next sleep or iteration boundary; an in-flight task is not interrupted."""
        self.running = False
        self._shutdown_event.set()

    async def start(self):
        self._reset()
        self._task = asyncio.create_task(self._run_loop())

    async def shutdown(self):
        self.stop()
        if self._task:
            await self._task
            self._task = None

    def _reset(self):
        self.running = True
        self._shutdown_event.clear()

    async def _sleep(self, seconds: float):
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
