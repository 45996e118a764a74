"""Task tracking for action lifecycles that suspended.

An action whose body suspends finishes its lifecycle in an asyncio task. The
service keeps a reference to every such task so it is not garbage collected
mid flight, and lets callers wait until every in-flight action has settled.
"""

import asyncio
from functools import partial
import logging
from typing import Any, Coroutine, Set
from abc import ABC, abstractmethod

_LOGGER = logging.getLogger(__name__)

__all__: list[str] = []


class TaskService(ABC):
    """Service for tracking and waiting for in-flight action lifecycles."""

    @abstractmethod
    def create_task(
        self, coro: Coroutine[None, None, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Create and track a new task.

        Args:
            coro: The coroutine to run as a task
            name: Optional task name, used in logs

        Returns:
            The created task
        """

    @abstractmethod
    async def block_till_done(self) -> None:
        """Wait until no tracked task is left.

        Tasks created while waiting, such as chained actions started by a
        finishing action, are waited for as well.
        """

    @abstractmethod
    def get_num_active_tasks(self) -> int:
        """Get the number of tracked tasks that have not finished."""


class TaskServiceImpl(TaskService):
    """Asyncio implementation of the TaskService."""

    def __init__(self) -> None:
        """Initialize the task service."""
        self._active_tasks: Set[asyncio.Task[Any]] = set()

    def create_task(
        self, coro: Coroutine[None, None, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Create and track a new task.

        Must be called with a running event loop.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._active_tasks.add(task)
        task.add_done_callback(partial(self._task_done, self._active_tasks))
        return task

    def _task_done(
        self, task_set: Set[asyncio.Task[Any]], task: asyncio.Task[Any]
    ) -> None:
        """Callback when a task is done."""
        try:
            # Raises any exception that escaped the lifecycle
            task.result()
        except asyncio.CancelledError:
            _LOGGER.debug("Task %s was cancelled", task.get_name())
        except Exception as e:
            _LOGGER.error("Task %s failed: %s", task.get_name(), e)
        finally:
            task_set.discard(task)

    async def block_till_done(self) -> None:
        """Wait until no tracked task is left."""
        while active_tasks := [t for t in self._active_tasks if not t.done()]:
            _LOGGER.debug("Waiting for %d tasks to complete", len(active_tasks))
            await asyncio.gather(*active_tasks)
        # Let done callbacks of the last batch run
        await asyncio.sleep(0)

    def get_num_active_tasks(self) -> int:
        """Get the number of tracked tasks that have not finished."""
        return len(self._active_tasks)
