"""Settings loaded from environment variables.

Every variable uses the ASTRO_ prefix:

    ASTRO_LOG_DIR          directory for the daily log files   (default: logs)
    ASTRO_LOG_LEVEL        console log level                   (default: WARNING)
    ASTRO_DATA_FILE        schedule JSON used by the CLI        (default: .local/astro/schedule.json)
    ASTRO_USE_COLORS       colored console notifications        (default: true)
    ASTRO_SHOW_TIMESTAMPS  prefix notifications with the time   (default: true)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "ASTRO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _log_level(raw: str, default: int) -> int:
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class Settings:
    log_dir: Path
    log_level: int
    data_file: Path
    use_colors: bool
    show_timestamps: bool

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            log_dir=_env_path(_k("LOG_DIR"), Path("logs")),
            log_level=_log_level(_env(_k("LOG_LEVEL"), "WARNING"), logging.WARNING),
            data_file=_env_path(_k("DATA_FILE"), Path(".local/astro/schedule.json")),
            use_colors=_env_bool(_k("USE_COLORS"), True),
            show_timestamps=_env_bool(_k("SHOW_TIMESTAMPS"), True),
        )


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reload_settings() -> Settings:
    """Re-read the environment (tests change env vars between cases)."""
    global _SETTINGS
    _SETTINGS = Settings.from_env()
    return _SETTINGS
