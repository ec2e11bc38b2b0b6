"""Background task runner abstraction.

Provides a protocol for submitting and tracking background tasks, with an
in-process asyncio implementation.  Batch jobs are launched fire-and-forget
through the runner; failures inside a task are logged and handed to an
``on_error`` callback instead of escaping into the event loop.
"""

import asyncio
import enum
import uuid
from collections.abc import Callable, Coroutine
from typing import Any, Protocol

from loguru import logger


class TaskStatus(enum.StrEnum):
    """Status of a background task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


ErrorCallback = Callable[[BaseException], None]


class BackgroundTaskRunner(Protocol):
    """Protocol for background task execution."""

    def submit_task(
        self,
        coro: Coroutine[Any, Any, Any],
        *,
        task_id: str | None = None,
        on_error: ErrorCallback | None = None,
    ) -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.
            task_id: Optional caller-chosen ID (e.g., the batch job ID).
            on_error: Called with the exception if the task fails or is cancelled.

        Returns:
            A task ID string for tracking.
        """
        ...

    def get_status(self, task_id: str) -> TaskStatus:
        """Get the current status of a background task."""
        ...

    def cancel(self, task_id: str) -> bool:
        """Request cancellation of a running task."""
        ...


class InProcessTaskRunner:
    """In-process background task runner using asyncio.

    Tasks run in the same event loop as the caller via ``asyncio.create_task()``.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, TaskStatus] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._errors: dict[str, BaseException] = {}

    def submit_task(
        self,
        coro: Coroutine[Any, Any, Any],
        *,
        task_id: str | None = None,
        on_error: ErrorCallback | None = None,
    ) -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.
            task_id: Optional caller-chosen ID. A UUID is generated when omitted.
            on_error: Called with the exception if the task fails or is cancelled.

        Returns:
            The task ID.

        Raises:
            ValueError: If a task with the same ID is still running.
        """
        task_id = task_id or str(uuid.uuid4())
        existing = self._tasks.get(task_id)
        if existing is not None and not existing.done():
            coro.close()
            msg = f"Task {task_id} is already running"
            raise ValueError(msg)

        self._statuses[task_id] = TaskStatus.PENDING
        self._errors.pop(task_id, None)

        async def _run() -> None:
            self._statuses[task_id] = TaskStatus.RUNNING
            try:
                await coro
                self._statuses[task_id] = TaskStatus.COMPLETED
            except asyncio.CancelledError as e:
                self._statuses[task_id] = TaskStatus.CANCELLED
                self._errors[task_id] = e
                logger.info(f"Background task {task_id} cancelled")
                if on_error is not None:
                    on_error(e)
            except Exception as e:
                self._statuses[task_id] = TaskStatus.FAILED
                self._errors[task_id] = e
                logger.exception(f"Background task {task_id} failed")
                if on_error is not None:
                    on_error(e)

        def _finalize(task: asyncio.Task[Any]) -> None:
            # Cancelled before _run started: the wrapped coroutine never ran.
            if task.cancelled():
                coro.close()
                error = asyncio.CancelledError()
                self._statuses[task_id] = TaskStatus.CANCELLED
                self._errors[task_id] = error
                if on_error is not None:
                    on_error(error)

        task = asyncio.create_task(_run())
        task.add_done_callback(_finalize)
        self._tasks[task_id] = task
        return task_id

    def get_status(self, task_id: str) -> TaskStatus:
        """Get the current status of a background task.

        Raises:
            KeyError: If the task ID is not found.
        """
        return self._statuses[task_id]

    def get_error(self, task_id: str) -> BaseException | None:
        """Return the exception that ended a task, if any."""
        return self._errors.get(task_id)

    def cancel(self, task_id: str) -> bool:
        """Request cancellation of a task.

        Returns:
            True if a running task was signalled, False if unknown or already done.
        """
        task = self._tasks.get(task_id)
        if task is None or task.done():
            return False
        return task.cancel()

    def forget(self, task_id: str) -> bool:
        """Drop the records of a finished task.

        Returns:
            True if the task was finished and its records were removed,
            False if it is unknown or still running.
        """
        task = self._tasks.get(task_id)
        if task is None or not task.done():
            return False
        del self._tasks[task_id]
        self._statuses.pop(task_id, None)
        self._errors.pop(task_id, None)
        return True

    def prune_finished(self) -> int:
        """Forget every finished task. Returns how many were removed."""
        finished = [task_id for task_id, task in self._tasks.items() if task.done()]
        for task_id in finished:
            self.forget(task_id)
        return len(finished)

    async def wait(self, task_id: str) -> TaskStatus:
        """Wait for a task to finish and return its final status.

        Raises:
            KeyError: If the task ID is not found.
        """
        task = self._tasks[task_id]
        await asyncio.wait({task})
        return self._statuses[task_id]
