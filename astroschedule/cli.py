"""
CLI (Command Line Interface).

Quick terminal commands on top of the schedule engine, e.g.:

    astroschedule add "Morning Exercise" 07:00 08:00 --priority high
    astroschedule list [--priority high] [--from 09:00 --to 12:00]
    astroschedule edit "Morning Exercise" --start 07:30 --end 08:30
    astroschedule complete "Morning Exercise"
    astroschedule remove "Morning Exercise"
    astroschedule export backup.json
    astroschedule interactive

Each one-shot command loads the schedule file (ASTRO_DATA_FILE or --file),
runs against the process-wide ScheduleManager and saves the file again after
a successful mutation.

Exit codes:
- 0 success
- 1 operational error (invalid input, conflict, task not found, bad file)
- 2 usage error (argparse)
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable

from rich.console import Console

from astroschedule.config import get_settings
from astroschedule.errors import ScheduleError, TaskNotFoundError
from astroschedule.factory import create_task
from astroschedule.listeners import ConsoleNotifier, TaskLogger
from astroschedule.logging_setup import setup_logging
from astroschedule.manager import ScheduleManager, get_manager
from astroschedule.model import Priority, Task, TaskChanges
from astroschedule.storage import load_schedule, read_records, save_schedule

logger = logging.getLogger(__name__)

# Commands that change the schedule and therefore save it afterwards.
MUTATING_COMMANDS = {"add", "remove", "edit", "complete", "reopen", "clear", "import", "interactive"}


def _task_line(task: Task) -> str:
    status = "done" if task.completed else "pending"
    return f"{task.start_time}-{task.end_time} | {task.description} | {task.priority.value} | {status} | {task.id}"


def _print_tasks(tasks: list[Task], empty_msg: str) -> None:
    if not tasks:
        print(empty_msg)
        return
    for i, t in enumerate(tasks, start=1):
        print(f"{i}. {_task_line(t)}")


def _cmd_add(args: argparse.Namespace, manager: ScheduleManager) -> int:
    task = create_task(args.description, args.start, args.end, args.priority)
    manager.add_task(task)
    return 0


def _cmd_remove(args: argparse.Namespace, manager: ScheduleManager) -> int:
    # Not found is a normal outcome, not an error.
    if not manager.remove_task(args.description):
        print(f"Not found: {args.description}")
    return 0


def _cmd_list(args: argparse.Namespace, manager: ScheduleManager) -> int:
    """
    List tasks sorted by start time, optionally filtered.
    """
    if (args.start is None) != (args.end is None):
        print("Please provide both --from and --to.")
        return 1

    if args.start is not None:
        tasks = manager.get_tasks_by_time_range(args.start, args.end)
    elif args.by_priority:
        tasks = manager.get_tasks_sorted_by_priority()
    else:
        tasks = manager.get_all_tasks()

    if args.priority:
        wanted = Priority.parse(args.priority)
        tasks = [t for t in tasks if t.priority is wanted]
    if args.completed:
        tasks = [t for t in tasks if t.completed]
    if args.pending:
        tasks = [t for t in tasks if not t.completed]

    _print_tasks(tasks, "No tasks scheduled.")
    return 0


def _cmd_edit(args: argparse.Namespace, manager: ScheduleManager) -> int:
    task = manager.get_task_by_description(args.description)
    if task is None:
        raise TaskNotFoundError(f'Task with description "{args.description}" not found.')

    changes = TaskChanges(
        description=args.new_description,
        start_time=args.start,
        end_time=args.end,
        priority=args.priority,
    )
    if changes.is_empty():
        print("Nothing to change (use --description, --start, --end or --priority).")
        return 1
    manager.update_task(task.id, changes)
    return 0


def _cmd_complete(args: argparse.Namespace, manager: ScheduleManager) -> int:
    manager.mark_completed(args.description)
    return 0


def _cmd_reopen(args: argparse.Namespace, manager: ScheduleManager) -> int:
    manager.mark_incomplete(args.description)
    return 0


def _cmd_clear(args: argparse.Namespace, manager: ScheduleManager) -> int:
    manager.clear_all_tasks()
    return 0


def _cmd_export(args: argparse.Namespace, manager: ScheduleManager) -> int:
    """
    Write the current schedule to a separate JSON file.
    """
    out_path = (args.out or "").strip()
    if not out_path:
        print("Please provide output .json path.")
        return 1
    n = save_schedule(manager, out_path)
    print(f"Exported {n} tasks to: {out_path}")
    return 0


def _cmd_import(args: argparse.Namespace, manager: ScheduleManager) -> int:
    """
    Replace the schedule with the content of a JSON file (all-or-nothing).
    """
    n = manager.import_records(read_records(args.src))
    print(f"Imported {n} tasks from: {args.src}")
    return 0


def _cmd_interactive(args: argparse.Namespace, manager: ScheduleManager) -> int:
    from astroschedule.interactive import run_interactive

    run_interactive(manager)
    return 0


COMMANDS: dict[str, Callable[[argparse.Namespace, ScheduleManager], int]] = {
    "add": _cmd_add,
    "remove": _cmd_remove,
    "list": _cmd_list,
    "edit": _cmd_edit,
    "complete": _cmd_complete,
    "reopen": _cmd_reopen,
    "clear": _cmd_clear,
    "export": _cmd_export,
    "import": _cmd_import,
    "interactive": _cmd_interactive,
}


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="astroschedule", description="AstroSchedule CLI")
    parser.add_argument("--file", type=str, default=None, help="Schedule JSON file (default: $ASTRO_DATA_FILE)")
    parser.add_argument("--quiet", action="store_true", help="Do not print event notifications")
    parser.add_argument("--no-color", action="store_true", help="Plain notifications without colors")
    sub = parser.add_subparsers(dest="command", required=True)

    p_add = sub.add_parser("add", help="Add a task")
    p_add.add_argument("description", type=str, help="Task description")
    p_add.add_argument("start", type=str, help="Start time HH:MM")
    p_add.add_argument("end", type=str, help="End time HH:MM")
    p_add.add_argument("--priority", "-p", type=str, default="Medium", help="Low, Medium or High")

    p_remove = sub.add_parser("remove", help="Remove a task by description")
    p_remove.add_argument("description", type=str)

    p_list = sub.add_parser("list", help="List tasks sorted by start time")
    p_list.add_argument("--priority", "-p", type=str, default=None, help="Only this priority")
    p_list.add_argument("--from", dest="start", type=str, default=None, help="Window start HH:MM")
    p_list.add_argument("--to", dest="end", type=str, default=None, help="Window end HH:MM")
    p_list.add_argument("--by-priority", action="store_true", help="High priority first")
    status = p_list.add_mutually_exclusive_group()
    status.add_argument("--completed", action="store_true", help="Only completed tasks")
    status.add_argument("--pending", action="store_true", help="Only pending tasks")

    p_edit = sub.add_parser("edit", help="Edit a task found by description")
    p_edit.add_argument("description", type=str, help="Current description")
    p_edit.add_argument("--description", dest="new_description", type=str, default=None)
    p_edit.add_argument("--start", type=str, default=None)
    p_edit.add_argument("--end", type=str, default=None)
    p_edit.add_argument("--priority", "-p", type=str, default=None)

    p_complete = sub.add_parser("complete", help="Mark a task as completed")
    p_complete.add_argument("description", type=str)

    p_reopen = sub.add_parser("reopen", help="Mark a completed task as pending again")
    p_reopen.add_argument("description", type=str)

    sub.add_parser("clear", help="Remove all tasks")

    p_export = sub.add_parser("export", help="Export the schedule to a JSON file")
    p_export.add_argument("out", type=str, help="Output file path (e.g. backup.json)")

    p_import = sub.add_parser("import", help="Replace the schedule with a JSON file")
    p_import.add_argument("src", type=str, help="Input file path")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(log_dir=settings.log_dir, console_level=settings.log_level)

    use_colors = settings.use_colors and not args.no_color
    console = Console(highlight=False, no_color=not use_colors)
    schedule_path = Path(args.file) if args.file else settings.data_file
    manager = get_manager()

    try:
        load_schedule(manager, schedule_path)
    except ScheduleError as exc:
        console.print(f"[ERROR] {exc}", style="bold red", markup=False)
        raise SystemExit(1)

    notifier = ConsoleNotifier(
        console,
        show_timestamps=settings.show_timestamps,
        use_colors=use_colors,
    )
    audit = TaskLogger()
    manager.attach(audit)
    if not args.quiet:
        manager.attach(notifier)

    try:
        code = COMMANDS[args.command](args, manager)
        # Listeners see the command, not the save that follows it.
        manager.detach(notifier)
        manager.detach(audit)
        if code == 0 and args.command in MUTATING_COMMANDS:
            save_schedule(manager, schedule_path)
    except ScheduleError as exc:
        console.print(f"[ERROR] {exc}", style="bold red", markup=False)
        code = 1
    except Exception:
        logger.exception("Unexpected failure during %r", args.command)
        raise
    finally:
        manager.detach(notifier)
        manager.detach(audit)

    raise SystemExit(code)
