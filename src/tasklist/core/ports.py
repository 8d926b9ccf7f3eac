# src/tasklist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the shell.

Menu handlers depend on this Protocol instead of the concrete flat-file store,
so tests can drive them against any in-memory implementation.
"""

from typing import Protocol

from ..tasks.task_models import Task


class TaskRepo(Protocol):
    """
    Task list owner.

    Lookups by id raise TaskNotFoundError; failed writes raise TaskStoreIOError
    after the in-memory change has been applied.
    """

    def count_tasks(self) -> int: ...
    def list_tasks(self) -> list[Task]: ...
    def get(self, task_id: int) -> Task: ...
    def create(self, description: str) -> Task: ...
    def toggle_completion(self, task_id: int) -> Task: ...
    def edit(self, task_id: int, new_description: str) -> Task: ...
    def delete(self, task_id: int) -> Task: ...
    def persist(self) -> None: ...
