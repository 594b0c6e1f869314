from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from taskq.db.session import Base
from taskq.domain.models import TaskDomain, as_utc
from taskq.domain.states import TaskState, TaskType

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

class Task(Base):
    __tablename__ = "task"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    type: Mapped[TaskType] = mapped_column(
        Enum(TaskType, name="task_type", values_callable=_enum_values),
        nullable=False,
    )
    state: Mapped[TaskState] = mapped_column(
        Enum(TaskState, name="task_state", values_callable=_enum_values),
        nullable=False,
        default=TaskState.PENDING,
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # Serves the claim query: state = 'Pending' AND start_time <= now
        Index("ix_task_poll", "state", "start_time", postgresql_where=text("state = 'Pending'")),
    )

    def to_domain(self) -> TaskDomain:
        return TaskDomain(
            id=self.id,
            type=self.type,
            state=self.state,
            start_time=as_utc(self.start_time),
        )
