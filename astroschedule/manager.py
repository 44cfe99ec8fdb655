"""
Schedule manager: the single owner of the day's tasks.

Responsibilities:
- keep the schedule (task id -> Task) free of overlapping intervals
- re-check every insertion, update and import before committing it
- publish an Event for every state transition and every rejected attempt

Callers never get a reference to a stored Task; every read and every event
carries a copy, so nothing outside the manager can break the no-overlap
invariant by mutating a task.

Mutations hold one re-entrant lock across validate -> conflict check ->
commit. Events are published after the lock is released, i.e. after the
state change is already committed.

Process-wide access goes through get_manager(); tests call reset_manager()
(or build their own ScheduleManager()) to start from an empty schedule.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Iterable, Optional, Union

from astroschedule import timeutil
from astroschedule.conflicts import check_overlap, find_conflicts
from astroschedule.errors import (
    ScheduleError,
    ScheduleImportError,
    TaskConflictError,
    TaskNotFoundError,
    TaskValidationError,
)
from astroschedule.events import Event, EventBus, EventKind, ScheduleListener
from astroschedule.factory import create_task_with_id
from astroschedule.model import Priority, Task, TaskChanges, parse_timestamp
from astroschedule.validation import validate_description, validate_task

logger = logging.getLogger(__name__)


def _by_start(tasks: Iterable[Task]) -> list[Task]:
    # sorted() is stable: equal start times keep insertion order
    return [t.clone() for t in sorted(tasks, key=lambda t: t.start_minutes)]


def _normalize_changes(changes: TaskChanges) -> TaskChanges:
    """
    Validate and normalize the fields present in a changeset.
    """
    out = TaskChanges(completed=changes.completed)
    if changes.description is not None:
        validate_description(changes.description)
        out.description = changes.description.strip()
    if changes.start_time is not None:
        timeutil.validate_format(changes.start_time)
        out.start_time = changes.start_time
    if changes.end_time is not None:
        timeutil.validate_format(changes.end_time)
        out.end_time = changes.end_time
    if changes.priority is not None:
        out.priority = Priority.parse(changes.priority)
    return out


class ScheduleManager:
    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._bus = EventBus()
        self._lock = threading.RLock()
        logger.debug("ScheduleManager instance created")

    # ------------------------------------------------------------------
    # Listener registration (subject side)
    # ------------------------------------------------------------------

    def attach(self, listener: ScheduleListener) -> bool:
        return self._bus.attach(listener)

    def detach(self, listener: ScheduleListener) -> bool:
        return self._bus.detach(listener)

    def detach_all(self) -> None:
        self._bus.detach_all()

    @property
    def listener_count(self) -> int:
        return self._bus.listener_count

    def publish(self, event: Event) -> None:
        self._bus.publish(event)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_task(self, task: Task) -> Task:
        """
        Store a task if it is valid and overlaps nothing.

        Raises TaskValidationError (after publishing TASK_ADD_FAILED) or
        TaskConflictError (after publishing TASK_CONFLICT). Returns a copy of
        the stored task.
        """
        candidate = task.clone()
        error: Optional[TaskValidationError] = None
        conflict: Optional[Task] = None

        with self._lock:
            try:
                validate_task(candidate)
                if candidate.id in self._tasks:
                    raise TaskValidationError(f"Task id {candidate.id!r} is already scheduled.")
            except TaskValidationError as exc:
                error = exc
            else:
                found = check_overlap(candidate, self._tasks.values())
                if found is not None:
                    conflict = found.clone()
                else:
                    self._tasks[candidate.id] = candidate.clone()

        if error is not None:
            self.publish(
                Event.from_error(
                    EventKind.TASK_ADD_FAILED,
                    error,
                    f'Failed to add task "{candidate.description}": {error}',
                    task=candidate.clone(),
                )
            )
            raise error

        if conflict is not None:
            message = f'Task "{candidate.description}" conflicts with "{conflict.description}"'
            self.publish(
                Event.create(
                    EventKind.TASK_CONFLICT,
                    message,
                    task=candidate.clone(),
                    conflicting_task=conflict.clone(),
                )
            )
            raise TaskConflictError(
                f'Task conflicts with existing task "{conflict.description}" '
                f"({conflict.start_time}-{conflict.end_time})",
                task=candidate,
                conflicting_task=conflict,
            )

        self.publish(
            Event.create(
                EventKind.TASK_ADDED,
                f'Task "{candidate.description}" added successfully',
                task=candidate.clone(),
            )
        )
        logger.info("ADD %s %s-%s %r", candidate.id, candidate.start_time, candidate.end_time, candidate.description)
        return candidate

    def remove_task(self, description: str) -> bool:
        """
        Remove the first task whose description matches (case-insensitive).

        A missing task is a normal outcome: returns False, publishes nothing.
        """
        with self._lock:
            task = self._find_by_description(description)
            if task is None:
                removed = None
            else:
                removed = self._tasks.pop(task.id)

        if removed is None:
            logger.info("Task not found for removal: %r", description)
            return False

        self.publish(
            Event.create(
                EventKind.TASK_REMOVED,
                f'Task "{removed.description}" removed successfully',
                task=removed.clone(),
                task_id=removed.id,
            )
        )
        logger.info("REMOVE %s %r", removed.id, removed.description)
        return True

    def update_task(self, task_id: str, changes: Optional[TaskChanges] = None) -> Task:
        """
        Apply a changeset to a stored task, all-or-nothing.

        The changes are tried on a copy first. If the copy is invalid
        (TASK_VALIDATION_FAILED) or overlaps another task
        (TASK_UPDATE_FAILED), the stored task is left exactly as it was.
        """
        changes = changes or TaskChanges()
        error: Optional[TaskValidationError] = None
        conflict: Optional[Task] = None
        trial: Optional[Task] = None

        with self._lock:
            stored = self._tasks.get(task_id)
            if stored is None:
                raise TaskNotFoundError(f'Task with ID "{task_id}" not found')

            trial = stored.clone()
            try:
                normalized = _normalize_changes(changes)
                trial.update(normalized)
                validate_task(trial)
            except TaskValidationError as exc:
                error = exc
            else:
                others = [t for t in self._tasks.values() if t.id != task_id]
                found = check_overlap(trial, others)
                if found is not None:
                    conflict = found.clone()
                else:
                    stored.update(normalized)
                    updated = stored.clone()

        if error is not None:
            self.publish(
                Event.from_error(
                    EventKind.TASK_VALIDATION_FAILED,
                    error,
                    f'Update of task "{trial.description}" rejected: {error}',
                    task_id=task_id,
                    changes=changes.to_dict(),
                )
            )
            raise error

        if conflict is not None:
            self.publish(
                Event.create(
                    EventKind.TASK_UPDATE_FAILED,
                    f'Task update would conflict with "{conflict.description}"',
                    task_id=task_id,
                    task=trial.clone(),
                    changes=changes.to_dict(),
                    conflicting_task=conflict.clone(),
                    error_name=TaskConflictError.__name__,
                )
            )
            raise TaskConflictError(
                f'Update would conflict with task "{conflict.description}" '
                f"({conflict.start_time}-{conflict.end_time})",
                task=trial,
                conflicting_task=conflict,
            )

        self.publish(
            Event.create(
                EventKind.TASK_UPDATED,
                f'Task "{updated.description}" updated successfully',
                task_id=task_id,
                task=updated.clone(),
                changes=changes.to_dict(),
            )
        )
        logger.info("UPDATE %s %s", task_id, changes.to_dict())
        return updated

    def mark_completed(self, description: str) -> Task:
        return self._set_completed(description, True)

    def mark_incomplete(self, description: str) -> Task:
        return self._set_completed(description, False)

    def _set_completed(self, description: str, completed: bool) -> Task:
        with self._lock:
            task = self._find_by_description(description)
            if task is None:
                raise TaskNotFoundError(f'Task "{description}" not found')
            if completed:
                task.mark_completed()
            else:
                task.mark_incomplete()
            snapshot = task.clone()

        if completed:
            kind = EventKind.TASK_COMPLETED
            message = f'Task "{snapshot.description}" marked as completed'
        else:
            kind = EventKind.TASK_UPDATED
            message = f'Task "{snapshot.description}" marked as pending'
        self.publish(Event.create(kind, message, task=snapshot.clone(), task_id=snapshot.id))
        logger.info("%s %s %r", "COMPLETE" if completed else "REOPEN", snapshot.id, snapshot.description)
        return snapshot

    def clear_all_tasks(self) -> int:
        with self._lock:
            count = len(self._tasks)
            self._tasks.clear()
        self.publish(
            Event.create(EventKind.SCHEDULE_CLEARED, f"Schedule cleared. {count} tasks removed.", count=count)
        )
        logger.info("All tasks cleared (count=%d)", count)
        return count

    # ------------------------------------------------------------------
    # Queries (always copies)
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.clone() if task else None

    def get_task_by_description(self, description: str) -> Optional[Task]:
        with self._lock:
            task = self._find_by_description(description)
            return task.clone() if task else None

    def get_all_tasks(self) -> list[Task]:
        with self._lock:
            return _by_start(self._tasks.values())

    def get_tasks_by_priority(self, priority: Union[str, Priority]) -> list[Task]:
        wanted = Priority.parse(priority)
        with self._lock:
            return _by_start(t for t in self._tasks.values() if t.priority is wanted)

    def get_tasks_by_time_range(self, start: str, end: str) -> list[Task]:
        """
        Tasks whose interval overlaps the window [start, end).
        """
        timeutil.validate_format(start)
        timeutil.validate_format(end)
        timeutil.validate_range(start, end)
        with self._lock:
            return _by_start(
                t for t in self._tasks.values() if timeutil.overlaps(t.start_time, t.end_time, start, end)
            )

    def get_completed_tasks(self) -> list[Task]:
        with self._lock:
            return _by_start(t for t in self._tasks.values() if t.completed)

    def get_pending_tasks(self) -> list[Task]:
        with self._lock:
            return _by_start(t for t in self._tasks.values() if not t.completed)

    def get_tasks_sorted_by_priority(self) -> list[Task]:
        """
        HIGH first, then MEDIUM, then LOW; start time within a priority.
        """
        tasks = self.get_all_tasks()
        tasks.sort(key=lambda t: -t.priority.weight)
        return tasks

    def check_for_conflict(self, task: Task) -> Optional[Task]:
        with self._lock:
            found = check_overlap(task, self._tasks.values())
            return found.clone() if found else None

    @property
    def task_count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def total_scheduled_minutes(self) -> int:
        with self._lock:
            return sum(t.duration_minutes for t in self._tasks.values())

    def _find_by_description(self, description: str) -> Optional[Task]:
        # First match in insertion order wins when descriptions repeat.
        needle = str(description or "").strip().casefold()
        for task in self._tasks.values():
            if task.description.casefold() == needle:
                return task
        return None

    # ------------------------------------------------------------------
    # Serialized form
    # ------------------------------------------------------------------

    def export_records(self) -> list[dict[str, Any]]:
        """
        Task records ordered by start time (see Task.to_dict()).
        """
        with self._lock:
            records = [t.to_dict() for t in sorted(self._tasks.values(), key=lambda t: t.start_minutes)]
        self.publish(
            Event.create(
                EventKind.SCHEDULE_EXPORTED, f"Exported {len(records)} tasks", count=len(records)
            )
        )
        return records

    def export_json(self) -> str:
        return json.dumps(self.export_records(), indent=2, ensure_ascii=False)

    def import_records(self, records: Any) -> int:
        """
        Replace the whole schedule with `records`.

        Every record is re-validated and the imported set is checked for
        duplicate ids and pairwise overlaps before anything is committed. On
        any failure the previous schedule stays untouched.
        """
        try:
            tasks = _build_import(records)
        except ScheduleError as exc:
            self._publish_import_failure(exc)
            raise

        with self._lock:
            self._tasks = {t.id: t for t in tasks}

        self.publish(
            Event.create(
                EventKind.SCHEDULE_IMPORTED, f"Imported {len(tasks)} tasks successfully", count=len(tasks)
            )
        )
        logger.info("Tasks imported (count=%d)", len(tasks))
        return len(tasks)

    def import_json(self, text: str) -> int:
        try:
            records = json.loads(text)
        except json.JSONDecodeError as exc:
            error = ScheduleImportError(f"Schedule JSON is invalid: {exc}")
            self._publish_import_failure(error)
            raise error from exc
        return self.import_records(records)

    def _publish_import_failure(self, error: ScheduleError) -> None:
        logger.error("Schedule import aborted: %s", error)
        self.publish(
            Event.from_error(EventKind.TASK_VALIDATION_FAILED, error, f"Schedule import aborted: {error}")
        )


def _build_import(records: Any) -> list[Task]:
    if not isinstance(records, list):
        raise ScheduleImportError("Schedule data must be a list of task records.")

    tasks: list[Task] = []
    seen: set[str] = set()
    for i, rec in enumerate(records, start=1):
        if not isinstance(rec, dict):
            raise ScheduleImportError(f"Record {i}: expected an object, got {type(rec).__name__}.")
        try:
            task = create_task_with_id(
                str(rec.get("id", "") or ""),
                str(rec.get("description", "") or ""),
                str(rec.get("startTime", "") or ""),
                str(rec.get("endTime", "") or ""),
                rec.get("priority", ""),
            )
        except TaskValidationError as exc:
            raise type(exc)(f"Record {i}: {exc}") from exc

        try:
            if rec.get("createdAt"):
                task.created_at = parse_timestamp(rec["createdAt"])
            if rec.get("updatedAt"):
                task.updated_at = parse_timestamp(rec["updatedAt"])
        except ValueError as exc:
            raise ScheduleImportError(f"Record {i}: invalid timestamp ({exc}).") from exc
        completed = rec.get("completed", False)
        if not isinstance(completed, bool):
            raise ScheduleImportError(f"Record {i}: completed must be a boolean, got {completed!r}.")
        task.completed = completed

        if task.id in seen:
            raise TaskValidationError(f"Record {i}: duplicate task id {task.id!r}.")
        seen.add(task.id)
        tasks.append(task)

    pairs = find_conflicts(tasks)
    if pairs:
        a, b = pairs[0]
        raise TaskConflictError(
            f'Imported tasks overlap: "{a.description}" ({a.start_time}-{a.end_time}) and '
            f'"{b.description}" ({b.start_time}-{b.end_time})',
            task=a,
            conflicting_task=b,
        )
    return tasks


_default_manager: Optional[ScheduleManager] = None
_default_lock = threading.Lock()


def get_manager() -> ScheduleManager:
    """
    Return the process-wide schedule manager, creating it on first use.
    """
    global _default_manager
    with _default_lock:
        if _default_manager is None:
            _default_manager = ScheduleManager()
        return _default_manager


def reset_manager() -> ScheduleManager:
    """
    Replace the process-wide manager with a fresh, empty one (tests).
    """
    global _default_manager
    with _default_lock:
        _default_manager = ScheduleManager()
        return _default_manager
