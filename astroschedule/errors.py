"""
Error taxonomy for the scheduling engine.

All errors here are "operational": they describe an expected, recoverable
outcome (bad input, a time conflict, a missing task) and never mean the
process has to stop. Front ends catch ScheduleError, show the message and
keep running.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from astroschedule.model import Task


class ScheduleError(Exception):
    """Base class of every error raised by the scheduling engine."""


class TaskValidationError(ScheduleError):
    """A task (or raw task input) is structurally invalid."""


class InvalidDescriptionError(TaskValidationError):
    pass


class InvalidTimeFormatError(TaskValidationError):
    pass


class InvalidTimeRangeError(TaskValidationError):
    pass


class InvalidPriorityError(TaskValidationError):
    pass


class TaskConflictError(ScheduleError):
    """
    A task would overlap another stored task.

    `conflicting_task` is a copy of the task already in the schedule.
    """

    def __init__(self, message: str, task: Optional[Task] = None, conflicting_task: Optional[Task] = None) -> None:
        super().__init__(message)
        self.task = task
        self.conflicting_task = conflicting_task


class TaskNotFoundError(ScheduleError):
    pass


class ScheduleImportError(ScheduleError):
    """The serialized schedule could not be read (bad JSON, wrong shape)."""
