from __future__ import annotations

from typing import Callable, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from astroschedule import timeutil
from astroschedule.errors import ScheduleError, TaskNotFoundError
from astroschedule.factory import create_task
from astroschedule.manager import ScheduleManager
from astroschedule.model import Priority, Task, TaskChanges

PromptFn = Callable[[str], str]

_PRIORITY_MARKUP = {
    Priority.HIGH: "bold red",
    Priority.MEDIUM: "bold yellow",
    Priority.LOW: "green",
}


class _Session:
    def __init__(self, manager: ScheduleManager, console: Console, prompt: PromptFn) -> None:
        self.manager = manager
        self.console = console
        self._prompt_fn = prompt

    def println(self, msg: str = "", style: Optional[str] = None) -> None:
        self.console.print(msg, style=style, markup=False, highlight=False)

    def prompt(self, msg: str) -> str:
        return self._prompt_fn(msg).strip()


def _task_table(tasks: list[Task], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Time")
    table.add_column("Task")
    table.add_column("Priority")
    table.add_column("Status")
    for i, t in enumerate(tasks, start=1):
        style = _PRIORITY_MARKUP.get(t.priority, "")
        status = "[magenta]COMPLETED[/]" if t.completed else "[cyan]PENDING[/]"
        table.add_row(
            str(i),
            f"{t.start_time}-{t.end_time}",
            Text(t.description),
            f"[{style}]{t.priority.value}[/]" if style else t.priority.value,
            status,
        )
    return table


def _print_header(s: _Session) -> None:
    tasks = s.manager.get_all_tasks()
    done = sum(1 for t in tasks if t.completed)
    s.println("\n=== AstroSchedule (interactive) ===", style="bold cyan")
    s.println(f"Tasks: {len(tasks)} | Completed: {done} | Scheduled: {s.manager.total_scheduled_minutes()} min")


def run_interactive(
    manager: ScheduleManager,
    console: Optional[Console] = None,
    prompt: Optional[PromptFn] = None,
) -> None:
    """
    Interactive menu loop. Event feedback (added, conflict, ...) comes from the
    listeners attached to the manager; this loop only asks and lists.
    """
    console = console or Console()
    s = _Session(manager, console, prompt or console.input)

    while True:
        _print_header(s)

        try:
            choice = s.prompt(
                "\n[1] Add task\n"
                "[2] Remove task\n"
                "[3] View all tasks\n"
                "[4] Edit task\n"
                "[5] Mark task completed\n"
                "[6] View tasks by priority\n"
                "[7] View time window\n"
                "[0] Exit\n"
                "Select: "
            )
        except (EOFError, KeyboardInterrupt):
            choice = "0"

        if choice == "0":
            s.println("Bye.")
            return

        flows = {
            "1": _flow_add,
            "2": _flow_remove,
            "3": _flow_view_all,
            "4": _flow_edit,
            "5": _flow_complete,
            "6": _flow_by_priority,
            "7": _flow_time_window,
        }
        flow = flows.get(choice)
        if flow is None:
            s.println("Invalid choice.")
            continue

        try:
            flow(s)
        except (EOFError, KeyboardInterrupt):
            s.println("\nBye.")
            return
        except ScheduleError as exc:
            s.println(f"[ERROR] {exc}", style="bold red")


def _flow_add(s: _Session) -> None:
    description = s.prompt("Description: ")
    start = s.prompt("Start time (HH:MM, e.g. 07:00): ")
    end = s.prompt("End time (HH:MM, e.g. 08:00): ")
    priority = s.prompt("Priority (Low, Medium, High; default Medium): ") or Priority.MEDIUM.value
    s.manager.add_task(create_task(description, start, end, priority))


def _flow_remove(s: _Session) -> None:
    description = s.prompt("Description of the task to remove: ")
    if not s.manager.remove_task(description):
        s.println(f"Task not found: {description}", style="yellow")


def _flow_view_all(s: _Session) -> None:
    tasks = s.manager.get_all_tasks()
    if not tasks:
        s.println("No tasks scheduled for the day.", style="yellow")
        return
    s.console.print(_task_table(tasks, "Daily schedule (sorted by time)"))


def _flow_edit(s: _Session) -> None:
    description = s.prompt("Description of the task to edit: ")
    task = s.manager.get_task_by_description(description)
    if task is None:
        raise TaskNotFoundError(f'Task with description "{description}" not found.')

    s.println(f"Editing: {task.description} (ID: {task.id})", style="cyan")
    changes = TaskChanges(
        description=s.prompt(f"New description (current: {task.description}, Enter to skip): ") or None,
        start_time=s.prompt(f"New start time (current: {task.start_time}, Enter to skip): ") or None,
        end_time=s.prompt(f"New end time (current: {task.end_time}, Enter to skip): ") or None,
        priority=s.prompt(f"New priority (current: {task.priority.value}, Enter to skip): ") or None,
    )
    if changes.is_empty():
        s.println("Nothing to change.")
        return
    s.manager.update_task(task.id, changes)


def _flow_complete(s: _Session) -> None:
    description = s.prompt("Description of the task to mark completed: ")
    s.manager.mark_completed(description)


def _flow_by_priority(s: _Session) -> None:
    priority = Priority.parse(s.prompt("Priority to filter by (Low, Medium, High): "))
    tasks = s.manager.get_tasks_by_priority(priority)
    if not tasks:
        s.println(f"No tasks scheduled with {priority.value} priority.", style="yellow")
        return
    s.console.print(_task_table(tasks, f"Tasks with priority {priority.value}"))


def _flow_time_window(s: _Session) -> None:
    start = timeutil.format_time(s.prompt("From (HH:MM): "))
    end = timeutil.format_time(s.prompt("To (HH:MM): "))
    tasks = s.manager.get_tasks_by_time_range(start, end)
    if not tasks:
        s.println(f"No tasks between {start} and {end}.", style="yellow")
        return
    s.console.print(_task_table(tasks, f"Tasks between {start} and {end}"))
