from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from pydantic import AwareDatetime, BaseModel, ConfigDict

from taskq.api.deps import Store
from taskq.api.v1.metrics import TASKS_CREATED
from taskq.domain.errors import TaskNotFoundError
from taskq.domain.states import TaskState, TaskType

router = APIRouter()

class TaskCreate(BaseModel):
    type: TaskType
    start_time: Optional[AwareDatetime] = None

class TaskCreated(BaseModel):
    task_id: UUID

class TaskResponse(BaseModel):
    id: UUID
    type: TaskType
    state: TaskState
    start_time: datetime
    model_config = ConfigDict(from_attributes=True)

@router.post("", response_model=TaskCreated, status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, store: Store):
    task_id = await store.create(payload.type, payload.start_time)
    TASKS_CREATED.labels(type=payload.type).inc()
    return TaskCreated(task_id=task_id)

@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    store: Store,
    task_type: Optional[TaskType] = Query(None, alias="type"),
    state: Optional[TaskState] = None,
):
    return await store.list(task_type=task_type, state=state)

@router.get("/{task_id}", response_model=TaskResponse)
async def show_task(task_id: UUID, store: Store):
    task = await store.get(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: UUID, store: Store):
    await store.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
