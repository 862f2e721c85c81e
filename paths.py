from __future__ import annotations
import logging
import os
import sys
from pathlib import Path


APP_NAME = "StudyTimetable"
DATA_DIR_ENV = "STUDY_TIMETABLE_DATA_DIR"
LOG_LEVEL_ENV = "STUDY_TIMETABLE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _platform_data_dir() -> Path:
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_NAME
    if sys.platform.startswith("win"):
        roaming = os.environ.get("APPDATA")
        return Path(roaming) / APP_NAME if roaming else home / "AppData" / "Roaming" / APP_NAME
    return home / ".local" / "share" / "study-timetable"


def get_data_dir() -> Path:
    """
    Resolve the directory holding subjects.json, timetables.json and
    assignments.json. STUDY_TIMETABLE_DATA_DIR wins over the per-OS default.
    """
    override = os.environ.get(DATA_DIR_ENV)
    base = Path(override).expanduser() if override else _platform_data_dir()
    base.mkdir(parents=True, exist_ok=True)
    return base


def get_log_level() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
