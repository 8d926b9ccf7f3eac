# tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

from .task_codec import decode_task, encode_tasks
from .task_models import Task, TaskNotFoundError, TaskStoreIOError

logger = logging.getLogger(__name__)


class TaskStore:
    """
    Flat-file task store.

    The whole list lives in memory; every mutation rewrites the file in full
    (temp file + os.replace). A missing file is an empty list.

    Ids come from an allocator owned by the instance:
    - restored on load as max(id) + 1
    - never decremented, so a deleted id is not handed out again
    """

    def __init__(self, path: str | Path = "tasks.txt", *, autoload: bool = True) -> None:
        self._path = Path(path)
        self._tasks: list[Task] = []
        self._next_id = 1
        if autoload:
            self.load()
        logger.info("TaskStore ready path=%s total=%s next_id=%s", self._path, len(self._tasks), self._next_id)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def next_id(self) -> int:
        return self._next_id

    # ---- low-level helpers ----

    def _find_index(self, task_id: int) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise TaskNotFoundError(task_id)

    def _allocate_id(self) -> int:
        task_id = self._next_id
        self._next_id += 1
        return task_id

    # ---- persistence ----

    def load(self) -> None:
        """
        Replace the in-memory list with the file contents.

        Malformed lines and repeated ids are skipped with a warning.
        Bytes that are not valid UTF-8 (e.g. cp1252 text from older files) are kept
        as surrogate escapes and written back unchanged by persist().
        """
        if not self._path.exists():
            logger.debug("Tasks file %s does not exist yet; starting empty.", self._path)
            self._tasks = []
            return

        tasks: list[Task] = []
        seen: set[int] = set()
        try:
            with self._path.open("r", encoding="utf-8", errors="surrogateescape") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.rstrip("\n")
                    if not line.strip():
                        continue
                    try:
                        task = decode_task(line)
                    except ValueError as e:
                        logger.warning("Skipping malformed line %s in %s: %s", lineno, self._path, e)
                        continue
                    if task.id in seen:
                        logger.warning("Skipping duplicate task id=%s at line %s in %s", task.id, lineno, self._path)
                        continue
                    seen.add(task.id)
                    tasks.append(task)
        except OSError as exc:
            raise TaskStoreIOError(f"Cannot read tasks file {self._path}: {exc}") from exc

        self._tasks = tasks
        # Never move the allocator backwards, even when reloading a shorter file.
        self._next_id = max(self._next_id, max(seen, default=0) + 1)
        logger.debug("Loaded %d tasks from %s", len(tasks), self._path)

    def persist(self) -> None:
        """Overwrite the tasks file with the full current list."""
        data = encode_tasks(self._tasks)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(data, encoding="utf-8", errors="surrogateescape", newline="\n")
            os.replace(tmp, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            logger.error("Failed to save %d tasks to %s: %s", len(self._tasks), self._path, exc)
            raise TaskStoreIOError(f"Cannot write tasks file {self._path}: {exc}") from exc
        logger.debug("Saved %d tasks to %s", len(self._tasks), self._path)

    # ---- public API ----

    def count_tasks(self) -> int:
        return len(self._tasks)

    def list_tasks(self) -> list[Task]:
        """Current tasks in insertion/load order (a copy of the list, not the store's own)."""
        return list(self._tasks)

    def get(self, task_id: int) -> Task:
        return self._tasks[self._find_index(task_id)]

    def create(self, description: str) -> Task:
        task = Task(id=self._allocate_id(), description=description, completed=False)
        self._tasks.append(task)
        logger.debug("Task created id=%s", task.id)
        self.persist()
        return task

    def toggle_completion(self, task_id: int) -> Task:
        task = self._tasks[self._find_index(task_id)]
        task.completed = not task.completed
        logger.debug("Task toggled id=%s completed=%s", task.id, task.completed)
        self.persist()
        return task

    def edit(self, task_id: int, new_description: str) -> Task:
        task = self._tasks[self._find_index(task_id)]
        task.description = new_description
        logger.debug("Task edited id=%s", task.id)
        self.persist()
        return task

    def delete(self, task_id: int) -> Task:
        task = self._tasks.pop(self._find_index(task_id))
        logger.debug("Task deleted id=%s", task.id)
        self.persist()
        return task
