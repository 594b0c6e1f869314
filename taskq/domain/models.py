from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from taskq.domain.states import TaskState, TaskType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalizes a timestamp to an aware UTC datetime.
    Naive values are taken to already be UTC (SQLite hands back naive datetimes).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TaskDomain:
    id: UUID
    type: TaskType
    state: TaskState
    start_time: datetime


@dataclass(frozen=True)
class ClaimedTask:
    id: UUID
    type: TaskType
