"""Background task data types."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Optional

import structlog

from futureresume.core.exceptions import BackgroundTaskError, TaskCancelledError

log = structlog.get_logger()


class TaskKind(str, Enum):
    RESUME_ANALYSIS = "resume-analysis"
    KEYWORD_EXTRACTION = "keyword-extraction"
    CONTENT_OPTIMIZATION = "content-optimization"
    ATS_SCORING = "ats-scoring"


class TaskPriority(IntEnum):
    """Task priority levels.

    Lower numeric value = served first.
    """
    HIGH = 0
    MEDIUM = 1
    LOW = 2


ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[BackgroundTaskError], None]
ProgressCallback = Callable[[int], None]


@dataclass
class BackgroundTask:
    """A queued unit of local analysis work.

    Comparison is first by priority, then by sequence (FIFO).
    Callbacks are optional; an absent callback is simply not invoked.
    """
    id: str
    kind: TaskKind
    payload: Any
    priority: TaskPriority
    sequence: int
    on_result: Optional[ResultCallback] = field(default=None, repr=False)
    on_error: Optional[ErrorCallback] = field(default=None, repr=False)
    on_progress: Optional[ProgressCallback] = field(default=None, repr=False)

    def __lt__(self, other: "BackgroundTask") -> bool:
        if self.priority != other.priority:
            return self.priority < other.priority
        return self.sequence < other.sequence


@dataclass(frozen=True)
class QueueStatus:
    queue_length: int
    active_tasks: int
    total_tasks: int


class TaskContext:
    """Handle given to a running task body.

    Reports progress and exposes cooperative cancellation: the body calls
    :meth:`checkpoint` between slices of work, which raises
    TaskCancelledError once the task has been cancelled.
    """

    def __init__(self, task_id: str, on_progress: Optional[ProgressCallback] = None) -> None:
        self.task_id = task_id
        self._on_progress = on_progress
        self._progress = 0
        self._cancelled = False

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def report_progress(self, percent: float) -> None:
        """Report progress, clamped to 0..100.

        Values not above the last reported one are ignored, so observers
        see a strictly increasing sequence.
        """
        value = int(max(0, min(100, percent)))
        if value <= self._progress:
            return
        self._progress = value
        if self._on_progress is None:
            return
        try:
            self._on_progress(value)
        except Exception as e:
            log.warning("task_callback_failed", task_id=self.task_id, callback="on_progress", error=str(e))

    async def checkpoint(self) -> None:
        """Yield to the event loop, then stop if cancelled."""
        await asyncio.sleep(0)
        if self._cancelled:
            raise TaskCancelledError(self.task_id)
