from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from taskq.db.models import Task
from taskq.domain.states import TaskState

async def set_task_state(session: AsyncSession, task_id: UUID, state: TaskState) -> bool:
    """
    Unconditionally sets a task's state. No check is made on the prior state;
    callers (claimer, worker loop) are responsible for using valid transitions.

    Returns False if the task no longer exists (e.g. deleted while running).
    """
    # UPDATE task SET state = :state WHERE id = :id
    stmt = update(Task).where(Task.id == task_id).values(state=state)
    result = await session.execute(stmt)
    return result.rowcount > 0
