from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _set_aside(path: Path, reason: str) -> None:
    """Move an unusable file to <name>.bak so the next write starts clean."""
    backup = path.with_name(path.name + ".bak")
    try:
        path.replace(backup)
    except OSError as exc:
        logger.warning("%s is %s and could not be moved aside: %s", path, reason, exc)
        return
    logger.warning("%s is %s, moved to %s", path, reason, backup.name)


def load_json(path: Path | str, default: Any = None) -> Any:
    """
    Read a JSON document, returning default when the file is missing or
    unreadable. Empty or malformed files are moved to .bak first.
    """
    path = Path(path)
    if not path.is_file():
        return default

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return default

    if not text.strip():
        _set_aside(path, "empty")
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        _set_aside(path, f"not valid JSON (line {exc.lineno})")
        return default


def dump_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
