"""Step scheduling core: task registry, worker pool and scheduler loop."""

from .executor import SlotWorkerPool, WorkerPool
from .scheduler import Assignment, Schedule, Scheduler, topological_order
from .task import ALPHABET, CompletionState, StepState, Task, TaskRegistry, is_ready

__all__ = [
    "ALPHABET",
    "Assignment",
    "CompletionState",
    "Schedule",
    "Scheduler",
    "SlotWorkerPool",
    "StepState",
    "Task",
    "TaskRegistry",
    "WorkerPool",
    "is_ready",
    "topological_order",
]
