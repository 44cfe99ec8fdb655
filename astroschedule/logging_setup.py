from __future__ import annotations

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the interactive console readable:
    - the ConsoleNotifier already shows every schedule event to the user
    - so the audit trail (astroschedule.audit) goes to the log file only
    - other third-party loggers only reach the console at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("astroschedule.audit"):
            return False

        if name.startswith("astroschedule"):
            return True

        # Python warnings captured into logging.
        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def log_file_path(log_dir: str | Path, day: Optional[date] = None) -> Path:
    """Daily log file, e.g. logs/2026-10-17_logs.log."""
    day = day or date.today()
    return Path(log_dir) / f"{day.isoformat()}_logs.log"


def setup_logging(
    *,
    log_dir: str | Path = "logs",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure logging with:
    - Console handler: filtered, warnings and errors by default
    - File handler: full logs (including the event audit trail) for today

    Call this ONCE, very early (before first logger.info). Returns the log
    file path so front ends can tell the user where to look.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_file_path(log_dir)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="[%(levelname)s] %(asctime)s.%(msecs)03d %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)

    return log_file
