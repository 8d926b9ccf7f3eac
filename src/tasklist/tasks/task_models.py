# tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass


class TaskNotFoundError(LookupError):
    """Raised when an operation targets an id that is not in the store."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with ID {task_id} not found.")
        self.task_id = task_id


class TaskStoreIOError(OSError):
    """
    The tasks file could not be read or written.

    The in-memory list stays usable; only the disk copy may be stale.
    """


@dataclass(slots=True)
class Task:
    id: int
    description: str
    completed: bool = False

    @property
    def marker(self) -> str:
        return "[x]" if self.completed else "[ ]"
