# src/tasklist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the flat-file TaskStore into AppState.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_models import TaskStoreIOError
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_file.parent.mkdir(parents=True, exist_ok=True)


def _move_aside(path: Path) -> Path | None:
    backup = path.with_name(path.name + ".bak")
    try:
        os.replace(path, backup)
    except OSError:
        logger.exception("Failed to move unreadable tasks file %s aside", path)
        return None
    logger.warning("Moved unreadable tasks file %s to %s", path, backup)
    return backup


def create_initial_state(*, settings=None, emit: Callable[[str], None] = print) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().

    An unreadable tasks file is moved aside to `<name>.bak` before the session
    starts with an empty list, so the first save cannot destroy it.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    try:
        task_store = TaskStore(settings.tasks_file)
    except TaskStoreIOError as e:
        logger.exception("Failed to load tasks from %s", settings.tasks_file)
        backup = _move_aside(settings.tasks_file)
        if backup is not None:
            emit(f"Warning: {e}. The file was moved to {backup}. Starting with an empty task list.")
        else:
            emit(f"Warning: {e}. Starting with an empty task list; saving will overwrite {settings.tasks_file}.")
        task_store = TaskStore(settings.tasks_file, autoload=False)

    return AppState(settings=settings, task_store=task_store)
