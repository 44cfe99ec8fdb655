"""
Structural validation of tasks.

The factory validates raw input before a Task exists; the schedule manager
re-checks stored and trial tasks with validate_task() before every commit.
"""

from __future__ import annotations

from astroschedule import timeutil
from astroschedule.errors import InvalidDescriptionError, InvalidPriorityError
from astroschedule.model import Priority, Task


def validate_description(description: str) -> None:
    if not isinstance(description, str) or not description.strip():
        raise InvalidDescriptionError("Task description cannot be empty.")


def validate_task(task: Task) -> None:
    """
    Raise the matching TaskValidationError subclass for the first problem found.
    """
    validate_description(task.description)
    timeutil.validate_format(task.start_time)
    timeutil.validate_format(task.end_time)
    timeutil.validate_range(task.start_time, task.end_time)
    if not isinstance(task.priority, Priority):
        raise InvalidPriorityError(f"Invalid priority: {task.priority!r}")
