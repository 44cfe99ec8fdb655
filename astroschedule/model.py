"""
Central data model definitions used across the project.

This module defines the canonical structure of Task objects so that:
- the factory, the manager and the front ends share the same field names
- the serialized form (JSON records) stays stable
- partial updates go through one explicit changeset type (TaskChanges)

Tasks are only created through astroschedule.factory; the schedule manager
owns the stored instances and hands out copies.
"""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from astroschedule import timeutil
from astroschedule.errors import InvalidPriorityError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: Union[str, "Priority"]) -> "Priority":
        """
        Accept an enum member or a case-insensitive name ('high', ' Medium ').
        """
        if isinstance(value, cls):
            return value
        norm = str(value or "").strip().lower()
        for p in cls:
            if p.value.lower() == norm:
                return p
        raise InvalidPriorityError(f"Invalid priority: {value!r}. Valid options are: Low, Medium, High")

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]

    def __str__(self) -> str:
        return self.value


_PRIORITY_WEIGHTS = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


@dataclass
class TaskChanges:
    """
    Sparse set of field updates for ScheduleManager.update_task().

    Only fields that are not None are applied.
    """

    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    priority: Optional[Union[str, Priority]] = None
    completed: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(v is None for v in asdict(self).values())

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for k, v in asdict(self).items():
            if v is None:
                continue
            out[k] = str(v) if isinstance(v, Priority) else v
        return out


@dataclass
class Task:
    """
    One scheduled activity with a half-open time interval [start_time, end_time).
    """

    id: str
    description: str
    start_time: str
    end_time: str
    priority: Priority
    completed: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    @property
    def start_minutes(self) -> int:
        return timeutil.to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return timeutil.to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def clone(self) -> Task:
        return copy.deepcopy(self)

    def update(self, changes: TaskChanges) -> None:
        """
        Apply the non-empty fields of a changeset in place and stamp updated_at.

        No validation happens here: ScheduleManager applies changes to a trial
        copy first and only commits a copy that passed validation.
        """
        if changes.description is not None:
            self.description = changes.description.strip()
        if changes.start_time is not None:
            self.start_time = changes.start_time.strip()
        if changes.end_time is not None:
            self.end_time = changes.end_time.strip()
        if changes.priority is not None:
            self.priority = Priority.parse(changes.priority)
        if changes.completed is not None:
            self.completed = bool(changes.completed)
        self.updated_at = utcnow()

    def mark_completed(self) -> None:
        self.completed = True
        self.updated_at = utcnow()

    def mark_incomplete(self) -> None:
        self.completed = False
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        """
        Serialized record: times as 'HH:MM', timestamps as ISO-8601.
        """
        return {
            "id": self.id,
            "description": self.description,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "priority": self.priority.value,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


def parse_timestamp(raw: Any) -> datetime:
    dt = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
