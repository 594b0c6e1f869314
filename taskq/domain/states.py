from enum import StrEnum

# Values double as the wire format and as the Postgres enum labels.

class TaskType(StrEnum):
    FOO = "Foo"
    BAR = "Bar"
    BAZ = "Baz"

class TaskState(StrEnum):
    PENDING = "Pending"  # Created, waiting for its start_time / a worker
    ACTIVE = "Active"    # Claimed by a worker, handler running
    FAILED = "Failed"    # Terminal
    DONE = "Done"        # Terminal
