# src/tasklist/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks.task_models import Task, TaskNotFoundError, TaskStoreIOError

Prompt = Callable[[str], str]
CommandEmitter = Callable[[str], None]
MenuHandler = Callable[[AppState, Prompt, CommandEmitter], str]

logger = logging.getLogger(__name__)

MENU_TITLE = "====== TODO MENU ======"
MENU_RULE = "======================="


class InvalidMenuSelection(ValueError):
    """Menu input that is not one of the registered keys."""


class InvalidIdInput(ValueError):
    """A task id prompt got something that is not an integer."""


@dataclass(frozen=True, slots=True)
class MenuEntry:
    key: str
    label: str
    handler: MenuHandler | None  # None marks the exit entry


class MenuRegistry:
    """Numbered menu used by the console connector (1..6)."""

    def __init__(self) -> None:
        self._entries: dict[str, MenuEntry] = {}

    def register(self, key: str, label: str, handler: MenuHandler) -> None:
        self._entries[key] = MenuEntry(key=key, label=label, handler=handler)

    def register_exit(self, key: str, label: str) -> None:
        self._entries[key] = MenuEntry(key=key, label=label, handler=None)

    def resolve(self, raw: str) -> MenuEntry:
        choice = raw.strip()
        if not choice.isdecimal():
            raise InvalidMenuSelection(f"not a number: {raw!r}")
        entry = self._entries.get(str(int(choice)))
        if entry is None:
            raise InvalidMenuSelection(f"out of range: {raw!r}")
        return entry

    def handle(
        self,
        state: AppState,
        entry: MenuEntry,
        ask: Prompt,
        emit: CommandEmitter,
    ) -> str:
        """
        Run one menu entry and return the message to show.

        Recoverable errors become plain messages; the caller keeps looping.
        """
        if entry.handler is None:
            return "Exiting..."

        try:
            return entry.handler(state, ask, emit)
        except InvalidIdInput:
            return "Invalid input."
        except TaskNotFoundError as e:
            return str(e)
        except TaskStoreIOError as e:
            logger.warning("Menu command %s could not save: %s", entry.key, e)
            return f"Warning: could not save tasks ({e}). Changes are kept for this session only."

    def build_menu(self) -> str:
        lines = [MENU_TITLE]
        for entry in self._entries.values():
            lines.append(f"{entry.key}. {entry.label}")
        lines.append(MENU_RULE)
        return "\n".join(lines)


registry = MenuRegistry()


def format_task(task: Task) -> str:
    # Undecodable bytes from older files are kept as surrogates; show them as U+FFFD.
    text = task.description.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    return f"{task.marker} {task.id}: {text}"


def format_task_list(tasks: list[Task]) -> str:
    return "\n".join(format_task(t) for t in tasks)


def parse_task_id(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidIdInput(f"not a task id: {raw!r}") from None


def _show_current(state: AppState, emit: CommandEmitter) -> None:
    emit("\nCurrent tasks:\n" + format_task_list(state.task_store.list_tasks()) + "\n")


def cmd_add(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    description = ask("Enter task description: ")
    task = state.task_store.create(description)
    logger.info("Task %s added.", task.id)
    return "Task added."


def cmd_view(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    tasks = state.task_store.list_tasks()
    if not tasks:
        return "No tasks to display."
    return f"\n====== TASK LIST ======\n{format_task_list(tasks)}\n{MENU_RULE}"


def cmd_toggle(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    if not state.task_store.count_tasks():
        return "No tasks to toggle."
    _show_current(state, emit)

    task_id = parse_task_id(ask("Enter the ID of the task to toggle completion: "))
    task = state.task_store.toggle_completion(task_id)
    return f"Task {task.id} marked as {'complete' if task.completed else 'incomplete'}."


def cmd_delete(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    if not state.task_store.count_tasks():
        return "No tasks to delete."
    _show_current(state, emit)

    task_id = parse_task_id(ask("Enter the ID of the task to delete: "))
    state.task_store.delete(task_id)
    return f"Task {task_id} deleted."


def cmd_edit(state: AppState, ask: Prompt, emit: CommandEmitter) -> str:
    """
    Ask for the id first and check it exists, then ask for the new text,
    so the user is not prompted for a description that would be thrown away.
    """
    if not state.task_store.count_tasks():
        return "No tasks to edit."
    _show_current(state, emit)

    task_id = parse_task_id(ask("Enter the ID of the task to edit: "))
    state.task_store.get(task_id)
    new_description = ask("Enter new description: ")
    state.task_store.edit(task_id, new_description)
    return f"Task {task_id} updated."


registry.register("1", "Add a task", cmd_add)
registry.register("2", "View all tasks", cmd_view)
registry.register("3", "Toggle task as complete/incomplete", cmd_toggle)
registry.register("4", "Delete a task", cmd_delete)
registry.register("5", "Edit a task description", cmd_edit)
registry.register_exit("6", "Exit")
