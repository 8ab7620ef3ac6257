"""Ordered in-memory registry of outstanding transcription tasks.

Position 0 always holds the focused task. The registry only orders and
mutates ``Task`` objects; arming or disarming the poller is the caller's job.
"""

import logging
from collections.abc import Iterable

from src.core.models import Task

logger = logging.getLogger(__name__)


class TaskRegistry:
    """Ordered collection of tasks with the focused task at the front."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: list[Task] = []
        for task in tasks:
            self.append(task)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(task.id == task_id for task in self._tasks)

    @property
    def focused(self) -> Task | None:
        """The task at position 0, or None when empty."""
        return self._tasks[0] if self._tasks else None

    def get(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def insert(self, task: Task) -> None:
        """Prepend a task, making it the focused one.

        Raises:
            ValueError: If a task with the same id is already registered.
        """
        self._ensure_unique(task.id)
        self._tasks.insert(0, task)

    def append(self, task: Task) -> None:
        """Add a task at the end (used when seeding from the backend)."""
        self._ensure_unique(task.id)
        self._tasks.append(task)

    def focus(self, index: int) -> Task:
        """Move the task at ``index`` to the front, keeping the others' order.

        Raises:
            IndexError: If ``index`` is out of range.
        """
        if not 0 <= index < len(self._tasks):
            raise IndexError(f"No task at position {index}")
        task = self._tasks.pop(index)
        self._tasks.insert(0, task)
        return task

    def update(self, task_id: str, **fields) -> Task | None:
        """Merge ``fields`` into the focused task if its id is ``task_id``.

        Returns:
            The updated task, or None when ``task_id`` is not focused.
        """
        task = self.focused
        if task is None or task.id != task_id:
            logger.debug("Ignoring update for unfocused task %s", task_id)
            return None
        for name, value in fields.items():
            setattr(task, name, value)
        return task

    def replace_id(self, old_id: str, new_id: str, **fields) -> Task:
        """Swap a provisional id for the backend-assigned one, in place.

        Raises:
            KeyError: If ``old_id`` is unknown.
            ValueError: If ``new_id`` is already taken by another task.
        """
        task = self.get(old_id)
        if task is None:
            raise KeyError(old_id)
        if new_id != old_id:
            self._ensure_unique(new_id)
        task.id = new_id
        for name, value in fields.items():
            setattr(task, name, value)
        return task

    def remove(self, task_id: str) -> Task | None:
        """Drop a task. Returns it, or None if it was not registered."""
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return self._tasks.pop(index)
        return None

    def clear(self) -> None:
        self._tasks.clear()

    def list(self) -> tuple[Task, ...]:
        """Read-only snapshot of the tasks in display order."""
        return tuple(task.model_copy() for task in self._tasks)

    def _ensure_unique(self, task_id: str) -> None:
        if task_id in self:
            raise ValueError(f"Task already registered: {task_id}")
