from .claimer import Claimer
from .dispatcher import Dispatcher
from .loop import WorkerLoop
from .runner import build_worker_loop, run_worker

__all__ = [
    "Claimer",
    "Dispatcher",
    "WorkerLoop",
    "build_worker_loop",
    "run_worker",
]
