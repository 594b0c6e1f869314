from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import APIRouter, Response

router = APIRouter()

# Metrics Definitions
TASKS_CREATED = Counter('taskq_tasks_created_total', 'Total tasks submitted', ['type'])
TASKS_CLAIMED = Counter('taskq_tasks_claimed_total', 'Total tasks claimed by workers', ['type'])
TASKS_FINISHED = Counter('taskq_tasks_finished_total', 'Total tasks that reached a terminal state', ['type', 'state'])

TASK_DURATION = Histogram(
    'taskq_task_duration_seconds',
    'Time spent in the task handler',
    ['type'],
    buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

WORKER_IDLE_POLLS = Counter(
    "taskq_worker_idle_polls_total",
    "Claim attempts that found no eligible task"
)

WORKER_ERRORS = Counter(
    "taskq_worker_errors_total",
    "Worker iterations that failed on a store fault"
)

@router.get("/metrics")
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
