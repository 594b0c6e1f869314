class TaskQueueError(Exception):
    """Base exception for task queue errors."""
    pass

class ConfigurationError(TaskQueueError):
    pass

class TaskNotFoundError(TaskQueueError):
    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")
