# tests/test_task_store.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tasklist.tasks.task_models import Task, TaskNotFoundError, TaskStoreIOError
from tasklist.tasks.task_store import TaskStore


def test_missing_file_is_empty_store(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.txt")
    assert store.list_tasks() == []
    assert store.next_id == 1
    assert not (tmp_path / "tasks.txt").exists()


def test_create_first_task(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.txt")

    task = store.create("Take out trash")

    assert task == Task(id=1, description="Take out trash", completed=False)
    assert store.list_tasks() == [task]
    assert (tmp_path / "tasks.txt").read_text("utf-8") == "1|Take out trash|0\n"


def test_ids_strictly_increase_and_are_not_reused(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "tasks.txt")
    ids = [store.create(f"t{i}").id for i in range(5)]
    assert ids == sorted(set(ids))

    store.delete(ids[-1])
    assert store.create("after delete").id == ids[-1] + 1


def test_round_trip_preserves_order_and_fields(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    store = TaskStore(path)
    store.create("plain")
    store.create("with | pipe and 100% effort")
    store.create("multi\nline\r\ntext")
    store.create("")
    store.toggle_completion(2)

    reloaded = TaskStore(path)

    assert reloaded.list_tasks() == store.list_tasks()
    assert reloaded.next_id == store.next_id == 5


def test_next_id_restored_from_max_id(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    path.write_text("7|seven|0\n3|three|1\n", encoding="utf-8")

    store = TaskStore(path)

    assert [t.id for t in store.list_tasks()] == [7, 3]
    assert store.create("next").id == 8


def test_toggle_scenario_rewrites_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    path.write_text("1|A|0\n2|B|1\n", encoding="utf-8")
    store = TaskStore(path)

    task = store.toggle_completion(1)

    assert task == Task(id=1, description="A", completed=True)
    assert path.read_text("utf-8") == "1|A|1\n2|B|1\n"


def test_toggle_twice_restores_state(store: TaskStore) -> None:
    task = store.create("flip me")
    store.toggle_completion(task.id)
    assert store.toggle_completion(task.id).completed is False


def test_edit_changes_only_description(store: TaskStore) -> None:
    store.create("old")
    store.toggle_completion(1)

    edited = store.edit(1, "new")

    assert edited.id == 1
    assert edited.completed is True
    assert edited.description == "new"


def test_delete_removes_task(store: TaskStore) -> None:
    store.create("keep")
    store.create("drop")

    removed = store.delete(2)

    assert removed.id == 2
    assert [t.id for t in store.list_tasks()] == [1]


def test_delete_missing_id_changes_nothing(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    path.write_text("1|A|0\n2|B|1\n", encoding="utf-8")
    store = TaskStore(path)
    before = store.list_tasks()
    mtime = path.stat().st_mtime_ns

    with pytest.raises(TaskNotFoundError) as excinfo:
        store.delete(99)

    assert excinfo.value.task_id == 99
    assert store.list_tasks() == before
    assert path.read_bytes() == b"1|A|0\n2|B|1\n"
    assert path.stat().st_mtime_ns == mtime


@pytest.mark.parametrize("op", ["toggle", "edit", "get"])
def test_not_found_operations(tmp_path: Path, op: str) -> None:
    path = tmp_path / "tasks.txt"
    path.write_text("1|only|0\n", encoding="utf-8")
    store = TaskStore(path)
    mtime = path.stat().st_mtime_ns

    with pytest.raises(TaskNotFoundError, match="Task with ID 42 not found."):
        if op == "toggle":
            store.toggle_completion(42)
        elif op == "edit":
            store.edit(42, "x")
        else:
            store.get(42)
    assert store.list_tasks() == [Task(id=1, description="only")]
    assert path.read_bytes() == b"1|only|0\n"
    assert path.stat().st_mtime_ns == mtime
    assert not (tmp_path / "tasks.txt.tmp").exists()


def test_list_returns_a_copy(store: TaskStore) -> None:
    store.create("a")
    listing = store.list_tasks()
    listing.clear()
    assert store.count_tasks() == 1


def test_load_skips_malformed_and_duplicate_lines(tmp_path: Path, caplog) -> None:
    path = tmp_path / "tasks.txt"
    path.write_text("1|ok|0\n\ngarbage\nx|bad id|0\n1|dup|1\n2|second|1\n", encoding="utf-8")

    with caplog.at_level("WARNING", logger="tasklist.tasks.task_store"):
        store = TaskStore(path)

    assert store.list_tasks() == [Task(1, "ok", False), Task(2, "second", True)]
    assert "duplicate task id=1" in caplog.text
    assert "malformed line 3" in caplog.text


def test_load_unreadable_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    path.mkdir()

    with pytest.raises(TaskStoreIOError):
        TaskStore(path)


def test_persist_failure_keeps_memory_state(store: TaskStore, monkeypatch) -> None:
    store.create("saved")

    def boom(src, dst):
        raise PermissionError("read-only medium")

    monkeypatch.setattr(os, "replace", boom)

    with pytest.raises(TaskStoreIOError, match="read-only medium"):
        store.create("unsaved")

    assert [t.description for t in store.list_tasks()] == ["saved", "unsaved"]
    assert store.next_id == 3

    monkeypatch.undo()
    store.persist()
    assert [t.description for t in TaskStore(store.path).list_tasks()] == ["saved", "unsaved"]


def test_persist_creates_parent_directory(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "nested" / "dir" / "tasks.txt")
    store.create("deep")
    assert (tmp_path / "nested" / "dir" / "tasks.txt").read_text("utf-8") == "1|deep|0\n"


def test_non_utf8_bytes_survive_load_and_save(tmp_path: Path) -> None:
    path = tmp_path / "tasks.txt"
    path.write_bytes(b"1|caf\xe9|0\n2|Take out trash|1\n")

    store = TaskStore(path)
    assert [t.id for t in store.list_tasks()] == [1, 2]

    store.create("new")

    assert path.read_bytes() == b"1|caf\xe9|0\n2|Take out trash|1\n3|new|0\n"


def test_failed_save_removes_temp_file(store: TaskStore, monkeypatch) -> None:
    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)

    with pytest.raises(TaskStoreIOError):
        store.create("unsaved")

    assert list(store.path.parent.glob("*.tmp")) == []


def test_tmp_suffixed_tasks_file_is_saved_through_sibling(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "tasks.tmp"
    calls: list[tuple[str, str]] = []
    real_replace = os.replace

    def recording_replace(src, dst):
        calls.append((os.fspath(src), os.fspath(dst)))
        real_replace(src, dst)

    monkeypatch.setattr(os, "replace", recording_replace)

    TaskStore(path).create("a")

    assert calls == [(str(tmp_path / "tasks.tmp.tmp"), str(path))]
    assert path.read_text("utf-8") == "1|a|0\n"
