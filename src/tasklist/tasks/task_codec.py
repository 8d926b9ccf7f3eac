# tasks/task_codec.py

"""
Line codec for the flat tasks file.

Each task is one line: ``id|description|completed``.

Descriptions are escaped so that a line can always be split unambiguously:
- ``%``  -> ``%25``
- ``|``  -> ``%7C``
- LF     -> ``%0A``
- CR     -> ``%0D``

Only those four sequences are decoded back. Lines written without escaping
(older files) still parse: the id is read up to the first delimiter and the
completion flag after the last one, so a raw ``|`` stays in the description.
"""

from __future__ import annotations

import re

from .task_models import Task

DELIMITER = "|"

_ESCAPES = {
    "%": "%25",
    DELIMITER: "%7C",
    "\n": "%0A",
    "\r": "%0D",
}
_UNESCAPES = {code: char for char, code in _ESCAPES.items()}
_ESCAPE_RE = re.compile(r"[%|\r\n]")
_UNESCAPE_RE = re.compile(r"%(25|7C|0A|0D)", re.IGNORECASE)


def escape_description(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], text)


def unescape_description(text: str) -> str:
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPES["%" + m.group(1).upper()], text)


def encode_task(task: Task) -> str:
    """Encode a task as a single line (without the trailing newline)."""
    flag = "1" if task.completed else "0"
    return f"{task.id}{DELIMITER}{escape_description(task.description)}{DELIMITER}{flag}"


def decode_task(line: str) -> Task:
    """
    Decode one line into a Task.

    Raises ValueError for lines that do not have the three fields
    or whose id is not a positive integer.
    """
    raw_id, sep, rest = line.partition(DELIMITER)
    if not sep:
        raise ValueError(f"missing delimiter in line: {line!r}")

    raw_desc, sep, raw_flag = rest.rpartition(DELIMITER)
    if not sep:
        raise ValueError(f"missing completed field in line: {line!r}")

    try:
        task_id = int(raw_id.strip())
    except ValueError:
        raise ValueError(f"invalid task id {raw_id!r}") from None
    if task_id <= 0:
        raise ValueError(f"task id must be positive, got {task_id}")

    return Task(
        id=task_id,
        description=unescape_description(raw_desc),
        completed=raw_flag.strip() == "1",
    )


def encode_tasks(tasks: list[Task]) -> str:
    return "".join(encode_task(t) + "\n" for t in tasks)
