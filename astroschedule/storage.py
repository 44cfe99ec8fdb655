"""
JSON file storage for the schedule.

The engine itself is in-memory only. The CLI uses this module to keep a
schedule between runs:

    .local/astro/schedule.json   (see ASTRO_DATA_FILE)

File format: a JSON array of task records as produced by
ScheduleManager.export_records().

Loading replaces the manager's schedule wholesale and inherits the
all-or-nothing import checks, so a broken file never half-loads.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from astroschedule.config import get_settings
from astroschedule.errors import ScheduleImportError
from astroschedule.manager import ScheduleManager


def _default_schedule_path() -> Path:
    """
    Using a function instead of a constant makes testing easier,
    because tests can override the path (or ASTRO_DATA_FILE).
    """
    return get_settings().data_file


def read_records(path: str | Path | None = None) -> list[dict[str, Any]]:
    """
    Read raw task records. A missing file is an empty schedule.
    """
    schedule_path = Path(path) if path is not None else _default_schedule_path()
    if not schedule_path.exists():
        return []

    try:
        data = json.loads(schedule_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ScheduleImportError(f"Cannot read schedule file {schedule_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ScheduleImportError(f"Schedule file {schedule_path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ScheduleImportError(f"Schedule file {schedule_path} must contain a list of tasks.")
    return data


def write_records(records: list[dict[str, Any]], path: str | Path | None = None) -> Path:
    """
    Write task records, creating parent directories if needed.
    """
    schedule_path = Path(path) if path is not None else _default_schedule_path()
    schedule_path.parent.mkdir(parents=True, exist_ok=True)
    schedule_path.write_text(json.dumps(records, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return schedule_path


def load_schedule(manager: ScheduleManager, path: str | Path | None = None) -> int:
    """
    Replace the manager's schedule with the file's content. Returns the task count.
    """
    return manager.import_records(read_records(path))


def save_schedule(manager: ScheduleManager, path: str | Path | None = None) -> int:
    records = manager.export_records()
    write_records(records, path)
    return len(records)
