"""Background task queue for local analysis work."""

from futureresume.tasks.handlers import DEFAULT_HANDLERS, TaskHandler
from futureresume.tasks.models import (
    BackgroundTask,
    QueueStatus,
    TaskContext,
    TaskKind,
    TaskPriority,
)
from futureresume.tasks.queue import BackgroundTaskQueue

__all__ = [
    "BackgroundTask",
    "BackgroundTaskQueue",
    "DEFAULT_HANDLERS",
    "QueueStatus",
    "TaskContext",
    "TaskHandler",
    "TaskKind",
    "TaskPriority",
]
