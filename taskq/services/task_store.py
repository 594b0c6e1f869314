import builtins
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskq.commands.set_task_state import set_task_state
from taskq.db.models import Task
from taskq.domain.models import TaskDomain, as_utc, utcnow
from taskq.domain.states import TaskState, TaskType

logger = logging.getLogger(__name__)

class TaskStore:
    """
    Persistence boundary for the `task` table.

    Every method is its own unit of work: a connection is checked out of the
    pool, one statement runs, and the transaction commits before returning.
    Database errors are not caught here; they propagate to the caller
    (HTTP error handler or worker loop backoff).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], clock=utcnow):
        self._session_factory = session_factory
        self._clock = clock

    async def create(self, task_type: TaskType, start_time: Optional[datetime] = None) -> UUID:
        task_id = uuid4()
        task = Task(
            id=task_id,
            type=task_type,
            state=TaskState.PENDING,
            start_time=as_utc(start_time) if start_time else self._clock(),
        )
        async with self._session_factory() as session:
            async with session.begin():
                session.add(task)
        logger.info(f"Task {task_id} created (type={task_type}, start_time={task.start_time})")
        return task_id

    async def get(self, task_id: UUID) -> Optional[TaskDomain]:
        async with self._session_factory() as session:
            task = await session.get(Task, task_id)
            return task.to_domain() if task else None

    async def list(
        self,
        task_type: Optional[TaskType] = None,
        state: Optional[TaskState] = None,
    ) -> builtins.list[TaskDomain]:
        stmt = select(Task)
        if task_type is not None:
            stmt = stmt.where(Task.type == task_type)
        if state is not None:
            stmt = stmt.where(Task.state == state)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [task.to_domain() for task in result.scalars().all()]

    async def delete(self, task_id: UUID) -> None:
        # Deleting a task that does not exist is not an error.
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(Task).where(Task.id == task_id))

    async def set_state(self, task_id: UUID, state: TaskState) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                return await set_task_state(session, task_id, state)
