"""
AstroSchedule: a single-day task scheduler that never lets two tasks overlap.
"""

from astroschedule.errors import (
    InvalidDescriptionError,
    InvalidPriorityError,
    InvalidTimeFormatError,
    InvalidTimeRangeError,
    ScheduleError,
    ScheduleImportError,
    TaskConflictError,
    TaskNotFoundError,
    TaskValidationError,
)
from astroschedule.events import BaseListener, CallbackListener, Event, EventBus, EventKind
from astroschedule.factory import create_task
from astroschedule.manager import ScheduleManager, get_manager, reset_manager
from astroschedule.model import Priority, Task, TaskChanges

__all__ = [
    "BaseListener",
    "CallbackListener",
    "Event",
    "EventBus",
    "EventKind",
    "InvalidDescriptionError",
    "InvalidPriorityError",
    "InvalidTimeFormatError",
    "InvalidTimeRangeError",
    "Priority",
    "ScheduleError",
    "ScheduleImportError",
    "ScheduleManager",
    "Task",
    "TaskChanges",
    "TaskConflictError",
    "TaskNotFoundError",
    "TaskValidationError",
    "create_task",
    "get_manager",
    "reset_manager",
]
