# src/tasklist/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TaskRepo


@dataclass
class AppState:
    # Settings are kept on the state so handlers do not read global config.
    settings: object
    task_store: TaskRepo
