from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskq.commands.set_task_state import set_task_state
from taskq.db.models import Task
from taskq.domain.models import ClaimedTask
from taskq.domain.states import TaskState


async def claim_task(session: AsyncSession, now: Optional[datetime] = None) -> Optional[ClaimedTask]:
    """
    Picks one eligible PENDING task and marks it ACTIVE.

    Must run inside a transaction on `session`: the row lock taken by the
    select is held until that transaction ends, and the ACTIVE state becomes
    visible to other claimers when it commits.

    Rows locked by another in-flight claim are skipped rather than waited on,
    so concurrent claimers see a smaller eligible set and never block each other.
    No ordering among eligible tasks is implied.

    Eligibility is judged against the database clock (`NOW()`) unless `now`
    is given.
    """
    # SELECT id, type FROM task
    # WHERE state = 'Pending' AND start_time <= NOW()
    # LIMIT 1 FOR NO KEY UPDATE SKIP LOCKED
    stmt = (
        select(Task.id, Task.type)
        .where(
            Task.state == TaskState.PENDING,
            Task.start_time <= (func.now() if now is None else now),
        )
        .limit(1)
        .with_for_update(skip_locked=True, key_share=True)
    )
    row = (await session.execute(stmt)).one_or_none()
    if row is None:
        return None

    await set_task_state(session, row.id, TaskState.ACTIVE)
    return ClaimedTask(id=row.id, type=row.type)
