import asyncio
import logging
import random
import time
from typing import Optional
from uuid import UUID

import httpx

from taskq.api.v1.metrics import TASK_DURATION
from taskq.domain.states import TaskState, TaskType

logger = logging.getLogger(__name__)

class Dispatcher:
    """
    Runs the handler for a task's type and returns the terminal state to record.

    Handlers never touch the store, and dispatch() never raises: any handler
    exception is logged and turned into FAILED so one bad task cannot take
    the worker loop down.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        foo_duration: float = 3.0,
        bar_url: str = "https://www.whattimeisitrightnow.com/",
        execution_timeout: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.http_client = http_client
        self.foo_duration = foo_duration
        self.bar_url = bar_url
        # None: no budget, a hung handler hangs the worker.
        self.execution_timeout = execution_timeout
        self.rng = rng or random.Random()

    async def dispatch(self, task_type: TaskType, task_id: UUID) -> TaskState:
        started = time.monotonic()
        budget = asyncio.timeout(self.execution_timeout)
        try:
            async with budget:
                state = await self._run_handler(task_type, task_id)
        except Exception as e:
            if budget.expired():
                logger.error(f"Task {task_id} (type={task_type}) exceeded its execution budget of {self.execution_timeout}s")
            else:
                logger.error(f"Task {task_id} (type={task_type}) handler raised: {e}", exc_info=True)
            state = TaskState.FAILED

        TASK_DURATION.labels(type=task_type).observe(time.monotonic() - started)
        return state

    async def _run_handler(self, task_type: TaskType, task_id: UUID) -> TaskState:
        match task_type:
            case TaskType.FOO:
                return await self.run_foo(task_id)
            case TaskType.BAR:
                return await self.run_bar(task_id)
            case TaskType.BAZ:
                return await self.run_baz(task_id)
        raise ValueError(f"Unknown task type {task_type!r}")

    async def run_foo(self, task_id: UUID) -> TaskState:
        await asyncio.sleep(self.foo_duration)
        logger.info(f"Foo {task_id}")
        return TaskState.DONE

    async def run_bar(self, task_id: UUID) -> TaskState:
        try:
            response = await self.http_client.get(self.bar_url)
        except httpx.HTTPError as e:
            logger.error(f"Bar task {task_id} failed: {e}")
            return TaskState.FAILED
        logger.info(f"Bar {task_id}: {response.status_code}")
        return TaskState.DONE

    async def run_baz(self, task_id: UUID) -> TaskState:
        logger.info(f"Baz {task_id}: {self.rng.randint(0, 343)}")
        return TaskState.DONE
