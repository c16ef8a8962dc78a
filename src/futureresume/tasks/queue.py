"""Priority background task queue with bounded concurrency.

Tasks are served by priority (HIGH before MEDIUM before LOW), FIFO within a
priority. At most ``max_concurrent_tasks`` bodies are in flight; whenever
one finishes the next queued task starts. When nothing is queued or
running the queue is idle and schedules nothing.

Starting work is deferred to the next event loop iteration, so tasks
submitted together are ordered by priority before any of them starts. A
task already running is never preempted.

Usage:
    queue = BackgroundTaskQueue(max_concurrent_tasks=3)
    task_id = queue.calculate_ats_score(resume_text, job_text, on_result=print)
    await queue.join()
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import structlog

from futureresume.core.exceptions import BackgroundTaskError
from futureresume.tasks.handlers import DEFAULT_HANDLERS, TaskHandler
from futureresume.tasks.models import (
    BackgroundTask,
    ErrorCallback,
    ProgressCallback,
    QueueStatus,
    ResultCallback,
    TaskContext,
    TaskKind,
    TaskPriority,
)

log = structlog.get_logger()


class BackgroundTaskQueue:
    """Runs local analysis tasks on the current event loop.

    Args:
        max_concurrent_tasks: Maximum task bodies in flight.
        handlers: Overrides or additions to the default handler per kind.
    """

    def __init__(
        self,
        max_concurrent_tasks: int = 3,
        handlers: Optional[Mapping[TaskKind, TaskHandler]] = None,
    ) -> None:
        if max_concurrent_tasks < 1:
            raise ValueError("max_concurrent_tasks must be >= 1")
        self._max_concurrent = max_concurrent_tasks
        self._handlers: Dict[TaskKind, TaskHandler] = dict(DEFAULT_HANDLERS)
        if handlers:
            self._handlers.update(handlers)

        self._heap: List[BackgroundTask] = []
        self._active: Dict[str, Tuple[TaskContext, asyncio.Task]] = {}
        self._sequence = itertools.count()
        self._pump_scheduled = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def max_concurrent_tasks(self) -> int:
        return self._max_concurrent

    def add_task(
        self,
        kind: Union[TaskKind, str],
        payload: Any,
        priority: TaskPriority = TaskPriority.MEDIUM,
        on_result: Optional[ResultCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Queue a task and return its id.

        Must be called from a running event loop.

        Raises:
            ValueError: Unknown task kind.
            RuntimeError: No running event loop.
        """
        loop = asyncio.get_running_loop()
        task = BackgroundTask(
            id=f"task-{uuid.uuid4().hex[:12]}",
            kind=TaskKind(kind),
            payload=payload,
            priority=TaskPriority(priority),
            sequence=next(self._sequence),
            on_result=on_result,
            on_error=on_error,
            on_progress=on_progress,
        )
        heapq.heappush(self._heap, task)
        self._idle.clear()

        log.info(
            "task_enqueued",
            task_id=task.id,
            kind=task.kind.value,
            priority=task.priority.name,
            queue_depth=len(self._heap),
        )

        if not self._pump_scheduled:
            self._pump_scheduled = True
            loop.call_soon(self._pump)

        return task.id

    def cancel_task(self, task_id: str) -> bool:
        """Cancel a queued or running task.

        A queued task is removed. A running task is flagged and stops at its
        next checkpoint; it keeps its slot until it exits and none of its
        callbacks fire.

        Returns:
            False if the id is unknown or the task already finished.
        """
        for i, task in enumerate(self._heap):
            if task.id == task_id:
                self._heap.pop(i)
                heapq.heapify(self._heap)
                log.info("task_cancelled", task_id=task_id, state="queued")
                self._mark_idle_if_done()
                return True

        active = self._active.get(task_id)
        if active is not None:
            ctx, _ = active
            ctx.cancel()
            log.info("task_cancelled", task_id=task_id, state="running")
            return True

        return False

    def cancel_all(self) -> int:
        """Cancel every queued and running task; return how many."""
        queued, running = len(self._heap), len(self._active)
        self._heap.clear()
        for ctx, _ in self._active.values():
            ctx.cancel()
        log.info("tasks_cancelled", queued=queued, running=running, count=queued + running)
        self._mark_idle_if_done()
        return queued + running

    def get_status(self) -> QueueStatus:
        return QueueStatus(
            queue_length=len(self._heap),
            active_tasks=len(self._active),
            total_tasks=len(self._heap) + len(self._active),
        )

    async def join(self) -> None:
        """Wait until nothing is queued or running."""
        await self._idle.wait()

    # === Convenience submitters ===

    def analyze_resume(self, resume_text: str, job_description: str, **callbacks: Any) -> str:
        return self.add_task(
            TaskKind.RESUME_ANALYSIS,
            {"resume_text": resume_text, "job_description": job_description},
            priority=TaskPriority.MEDIUM,
            **callbacks,
        )

    def extract_keywords(self, text: str, **callbacks: Any) -> str:
        return self.add_task(
            TaskKind.KEYWORD_EXTRACTION,
            {"text": text},
            priority=TaskPriority.LOW,
            **callbacks,
        )

    def optimize_content(self, content: str, target_keywords: List[str], **callbacks: Any) -> str:
        return self.add_task(
            TaskKind.CONTENT_OPTIMIZATION,
            {"content": content, "target_keywords": list(target_keywords)},
            priority=TaskPriority.MEDIUM,
            **callbacks,
        )

    def calculate_ats_score(self, resume_text: str, job_description: str, **callbacks: Any) -> str:
        return self.add_task(
            TaskKind.ATS_SCORING,
            {"resume_text": resume_text, "job_description": job_description},
            priority=TaskPriority.HIGH,
            **callbacks,
        )

    # === Internals ===

    def _pump(self) -> None:
        """Start queued tasks while slots are free."""
        self._pump_scheduled = False
        loop = asyncio.get_running_loop()

        while self._heap and len(self._active) < self._max_concurrent:
            task = heapq.heappop(self._heap)
            ctx = TaskContext(task.id, on_progress=task.on_progress)
            runner = loop.create_task(self._run(task, ctx))
            self._active[task.id] = (ctx, runner)

        self._mark_idle_if_done()

    def _mark_idle_if_done(self) -> None:
        if not self._heap and not self._active:
            self._idle.set()

    async def _run(self, task: BackgroundTask, ctx: TaskContext) -> None:
        log.debug("task_started", task_id=task.id, kind=task.kind.value)
        try:
            handler = self._handlers.get(task.kind)
            if handler is None:
                raise ValueError(f"No handler registered for task kind '{task.kind.value}'")

            result = await handler(task.payload, ctx)

            if ctx.cancelled:
                log.info("task_abandoned", task_id=task.id)
                return

            ctx.report_progress(100)
            log.info("task_completed", task_id=task.id, kind=task.kind.value)
            _invoke(task.id, "on_result", task.on_result, result)

        except Exception as e:
            if ctx.cancelled:
                log.info("task_abandoned", task_id=task.id)
                return

            if isinstance(e, BackgroundTaskError):
                error = e
            else:
                error = BackgroundTaskError(task.id, task.kind.value, message=f"{task.kind.value} failed: {e}")
                error.__cause__ = e

            log.warning(
                "task_failed",
                task_id=task.id,
                kind=task.kind.value,
                error_class=type(e).__name__,
                error=str(e),
            )
            _invoke(task.id, "on_error", task.on_error, error)

        finally:
            self._active.pop(task.id, None)
            self._pump()


def _invoke(task_id: str, name: str, callback: Optional[Callable[[Any], None]], arg: Any) -> None:
    if callback is None:
        return
    try:
        callback(arg)
    except Exception as e:
        log.warning("task_callback_failed", task_id=task_id, callback=name, error=str(e))
