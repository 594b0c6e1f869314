import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskq.api.v1.metrics import TASKS_CLAIMED
from taskq.commands.claim_task import claim_task
from taskq.domain.models import ClaimedTask, as_utc

logger = logging.getLogger(__name__)

class Claimer:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._session_factory = session_factory
        # None: the database's NOW() decides which tasks are due.
        self._clock = clock

    async def claim(self) -> Optional[ClaimedTask]:
        """
        Takes exclusive ownership of one eligible task, or returns None if
        nothing is eligible right now. Two concurrent calls never return the
        same task: the select-and-mark runs in one transaction under a
        skip-locked row lock.
        """
        now = as_utc(self._clock()) if self._clock is not None else None
        async with self._session_factory() as session:
            async with session.begin():
                claimed = await claim_task(session, now)

        if claimed:
            TASKS_CLAIMED.labels(type=claimed.type).inc()
            logger.info(f"Claimed task {claimed.id} (type={claimed.type})")
        return claimed
