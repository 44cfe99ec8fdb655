"""
Task factory.

The only sanctioned way to obtain a Task with a fresh identity. Raw input is
validated in a fixed order (description, time formats, time range, priority)
so callers always get the most basic problem first.

Task IDs look like:

    TASK-20261017-091500-0001

i.e. creation timestamp + a process-wide counter. The counter alone is
enough within one run; the timestamp keeps IDs distinct across runs even
though the counter restarts at 1.
"""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from astroschedule import timeutil
from astroschedule.errors import TaskValidationError
from astroschedule.model import Priority, Task, TaskChanges
from astroschedule.validation import validate_description

logger = logging.getLogger(__name__)

ID_PREFIX = "TASK"

_counter_lock = threading.Lock()
_counter = itertools.count(1)
_last_value = 0


def _next_id() -> str:
    global _last_value
    with _counter_lock:
        _last_value = next(_counter)
        n = _last_value
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return f"{ID_PREFIX}-{stamp}-{n:04d}"


def reset_counter() -> None:
    """Restart the ID counter at 1 (tests only)."""
    global _counter, _last_value
    with _counter_lock:
        _counter = itertools.count(1)
        _last_value = 0
    logger.debug("Task counter reset")


def counter_value() -> int:
    with _counter_lock:
        return _last_value


def _validated_fields(
    description: str, start: str, end: str, priority: Union[str, Priority]
) -> tuple[str, str, str, Priority]:
    validate_description(description)
    timeutil.validate_format(start)
    timeutil.validate_format(end)
    timeutil.validate_range(start, end)
    return description.strip(), start, end, Priority.parse(priority)


def create_task(description: str, start: str, end: str, priority: Union[str, Priority]) -> Task:
    """
    Validate raw input and build a new pending Task with a unique id.
    """
    desc, start_s, end_s, prio = _validated_fields(description, start, end, priority)
    task = Task(id=_next_id(), description=desc, start_time=start_s, end_time=end_s, priority=prio)
    logger.debug("Task created: %s (%s)", task.id, task.description)
    return task


def create_task_with_id(
    task_id: str, description: str, start: str, end: str, priority: Union[str, Priority]
) -> Task:
    """
    Same checks as create_task(), but keep a known id (used when importing).
    """
    if not isinstance(task_id, str) or not task_id.strip():
        raise TaskValidationError("Task id cannot be empty.")
    desc, start_s, end_s, prio = _validated_fields(description, start, end, priority)
    return Task(id=task_id.strip(), description=desc, start_time=start_s, end_time=end_s, priority=prio)


def create_task_from_dict(data: dict[str, Any]) -> Task:
    """
    Build a task from a plain dict with keys description/start/end/priority
    and an optional completed flag.
    """
    task = create_task(
        str(data.get("description", "") or ""),
        str(data.get("start", "") or ""),
        str(data.get("end", "") or ""),
        data.get("priority", ""),
    )
    if data.get("completed"):
        task.mark_completed()
    return task


def create_tasks(rows: Iterable[dict[str, Any]]) -> list[Task]:
    """
    Build several tasks. Every row is tried; if any fail, one
    TaskValidationError lists all failing rows and no task is returned.
    """
    tasks: list[Task] = []
    errors: list[str] = []
    for i, row in enumerate(rows, start=1):
        try:
            tasks.append(create_task_from_dict(row))
        except TaskValidationError as exc:
            errors.append(f"Task {i}: {exc}")
    if errors:
        raise TaskValidationError("Failed to create some tasks:\n" + "\n".join(errors))
    return tasks


def clone_task(task: Task, changes: Optional[TaskChanges] = None) -> Task:
    """
    Copy a task under a fresh id, optionally with some fields replaced.
    """
    changes = changes or TaskChanges()
    new_task = create_task(
        changes.description if changes.description is not None else task.description,
        changes.start_time if changes.start_time is not None else task.start_time,
        changes.end_time if changes.end_time is not None else task.end_time,
        changes.priority if changes.priority is not None else task.priority,
    )
    completed = changes.completed if changes.completed is not None else task.completed
    if completed:
        new_task.mark_completed()
    return new_task
