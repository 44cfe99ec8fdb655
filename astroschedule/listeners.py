"""
Concrete schedule listeners.

- ConsoleNotifier: immediate, colored feedback in the terminal (rich)
- TaskLogger: audit trail of every event through the logging module

Both are plain event-bus listeners; the schedule manager does not know how
they render or where they write.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from rich.console import Console

from astroschedule.events import BaseListener, Event, EventKind
from astroschedule.model import Priority, Task

_PRIORITY_STYLES = {
    Priority.HIGH: "bold white on red",
    Priority.MEDIUM: "bold black on yellow",
    Priority.LOW: "white on green",
}


def _task_line(task: Any) -> str:
    if not isinstance(task, Task):
        return ""
    return f"{task.description} [{task.priority.value}] ({task.start_time}-{task.end_time})"


class ConsoleNotifier(BaseListener):
    """
    Prints a short block per event, e.g.

        [09:12:44] CONFLICT DETECTED!
           Task "Exercise" conflicts with "Breakfast"
           -> Conflicts with existing task:
              Breakfast [Medium] (08:00-09:00)
           -> Operation NOT completed.
    """

    name = "ConsoleNotifier"

    def __init__(
        self,
        console: Optional[Console] = None,
        show_timestamps: bool = True,
        use_colors: bool = True,
        interested_in: Optional[Iterable[EventKind]] = None,
    ) -> None:
        super().__init__(interested_in)
        self.console = console or Console(highlight=False, no_color=not use_colors)
        self.show_timestamps = show_timestamps
        self.use_colors = use_colors

    def _print(self, text: str, style: str = "") -> None:
        self.console.print(text, style=style if (self.use_colors and style) else None, markup=False, highlight=False)

    def on_event(self, event: Event) -> None:
        prefix = f"[{event.timestamp.astimezone().strftime('%H:%M:%S')}] " if self.show_timestamps else ""
        kind = event.kind
        task = event.context.get("task")

        if kind is EventKind.TASK_CONFLICT:
            self._print(f"\n{prefix}CONFLICT DETECTED!", "bold red")
            self._print(f"   {event.message}", "bold red")
            other = event.context.get("conflicting_task")
            if isinstance(other, Task):
                self._print("   -> Conflicts with existing task:", "red")
                self._print(f"      {_task_line(other)}", _PRIORITY_STYLES.get(other.priority, "red"))
            self._print("   -> Operation NOT completed.", "bold red")
        elif kind is EventKind.TASK_ADDED:
            self._print(f"\n{prefix}Task added successfully.", "bold green")
            self._print(f"   {event.message}", "green")
            if task is not None:
                self._print(f"   -> {_task_line(task)}", "green")
        elif kind is EventKind.TASK_REMOVED:
            self._print(f"\n{prefix}Task removed:", "yellow")
            self._print(f"   {event.message}", "yellow")
        elif kind is EventKind.TASK_UPDATED:
            self._print(f"\n{prefix}Task updated:", "bold blue")
            self._print(f"   {event.message}", "blue")
            if task is not None:
                self._print(f"   -> New schedule: {_task_line(task)}", "blue")
        elif kind is EventKind.TASK_COMPLETED:
            self._print(f"\n{prefix}Task completed! Well done, Astronaut!", "bold magenta")
            self._print(f"   {event.message}", "magenta")
        elif kind in (
            EventKind.TASK_ADD_FAILED,
            EventKind.TASK_UPDATE_FAILED,
            EventKind.TASK_VALIDATION_FAILED,
        ):
            self._print(f"\n{prefix}OPERATION FAILED:", "bold red")
            self._print(f"   {event.message}", "red")
            error_name = event.context.get("error_name")
            if error_name:
                self._print(f"   -> Error type: {error_name}", "red")
        else:
            # SCHEDULE_CLEARED / SCHEDULE_IMPORTED / SCHEDULE_EXPORTED
            self._print(f"\n{prefix}System info:", "cyan")
            self._print(f"   {event.message}", "cyan")


class TaskLogger(BaseListener):
    """
    Writes every event to the 'astroschedule.audit' logger.

    Level mapping:
    - TASK_CONFLICT -> WARNING
    - *_FAILED      -> ERROR
    - everything else -> INFO
    """

    name = "TaskLogger"

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        super().__init__()
        self.logger = logger or logging.getLogger("astroschedule.audit")

    def on_event(self, event: Event) -> None:
        ctx = event.context
        task = ctx.get("task")
        meta = {
            "event": event.kind.value,
            "task_id": getattr(task, "id", None) or ctx.get("task_id"),
            "task_description": getattr(task, "description", None),
            "error_name": ctx.get("error_name"),
        }
        meta_s = " ".join(f"{k}={v!r}" for k, v in meta.items() if v is not None)

        if event.kind is EventKind.TASK_CONFLICT:
            other = ctx.get("conflicting_task")
            details = f" with existing task: {_task_line(other)}" if isinstance(other, Task) else ""
            self.logger.warning("[CONFLICT] %s%s | %s", event.message, details, meta_s)
        elif event.is_error:
            self.logger.error("[FAILURE] %s | %s", event.message, meta_s)
        else:
            self.logger.info("[OPERATION] %s | %s", event.message, meta_s)
