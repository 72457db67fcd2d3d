from .deferred import DeferredScheduler
from .schemas import TERMINAL_STATES, TaskEvent, TaskRecord, TaskState, is_terminal
from .store import UNSET, TaskStore, normalize_task_id

__all__ = [
    "DeferredScheduler",
    "TERMINAL_STATES",
    "TaskEvent",
    "TaskRecord",
    "TaskState",
    "TaskStore",
    "UNSET",
    "is_terminal",
    "normalize_task_id",
]
