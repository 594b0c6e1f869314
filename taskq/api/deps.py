from typing import Annotated

from fastapi import Depends, Request

from taskq.services.task_store import TaskStore

def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store

# Dependency for the task store bound to the app's connection pool
Store = Annotated[TaskStore, Depends(get_task_store)]
