from __future__ import annotations
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Callable, List, Optional
from pydantic import TypeAdapter, ValidationError
from models import AppState, Assignment, Note, StudyTimetable, Subject
from paths import get_data_dir
from storage import dump_json, load_json
from subjects import default_subjects
from timetables import find_timetable, remove_timetable, upsert_timetable

logger = logging.getLogger(__name__)

SUBJECTS_KEY = "subjects"
TIMETABLES_KEY = "timetables"
ASSIGNMENTS_KEY = "assignments"
NOTES_KEY = "notes"

_SUBJECTS = TypeAdapter(List[Subject])
_TIMETABLES = TypeAdapter(List[StudyTimetable])
_ASSIGNMENTS = TypeAdapter(List[Assignment])
_NOTES = TypeAdapter(List[Note])


def _sanitize_key(name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", name.strip())
    safe = safe.strip("_") or "default"
    return safe[:80]


class LocalStore:
    """
    Key-value store over JSON files, one file per key.

    Collections are read fresh on every load and written back whole on
    every save; callers hold no reference to stored data between calls.
    """

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else get_data_dir()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def key_path(self, key: str) -> Path:
        return self.data_dir / f"{_sanitize_key(key)}.json"

    def get(self, key: str, default: Any = None) -> Any:
        return load_json(self.key_path(key), default)

    def put(self, key: str, value: Any) -> None:
        """
        Write to a temp file beside the target, then swap it in with
        os.replace. On failure the previous file is left untouched.
        """
        path = self.key_path(key)
        fd, temp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(dump_json(value))
            os.replace(temp, path)
        except BaseException:
            Path(temp).unlink(missing_ok=True)
            raise

    def _load_list(
        self,
        key: str,
        adapter: TypeAdapter,
        default: Callable[[], list],
    ) -> list:
        raw = self.get(key)
        if raw is None:
            return default()
        try:
            return adapter.validate_python(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding invalid '%s' data (%d error(s))", key, exc.error_count()
            )
            return default()

    def _save_list(self, key: str, adapter: TypeAdapter, items: list) -> None:
        self.put(key, adapter.dump_python(list(items), mode="json"))
        logger.info("Saved %d %s", len(items), key)

    def load_subjects(self) -> List[Subject]:
        return self._load_list(SUBJECTS_KEY, _SUBJECTS, default_subjects)

    def save_subjects(self, subjects: List[Subject]) -> None:
        self._save_list(SUBJECTS_KEY, _SUBJECTS, subjects)

    def load_timetables(self) -> List[StudyTimetable]:
        return self._load_list(TIMETABLES_KEY, _TIMETABLES, list)

    def save_timetables(self, timetables: List[StudyTimetable]) -> None:
        self._save_list(TIMETABLES_KEY, _TIMETABLES, timetables)

    def load_assignments(self) -> List[Assignment]:
        return self._load_list(ASSIGNMENTS_KEY, _ASSIGNMENTS, list)

    def save_assignments(self, assignments: List[Assignment]) -> None:
        self._save_list(ASSIGNMENTS_KEY, _ASSIGNMENTS, assignments)

    def load_notes(self) -> List[Note]:
        return self._load_list(NOTES_KEY, _NOTES, list)

    def save_notes(self, notes: List[Note]) -> None:
        self._save_list(NOTES_KEY, _NOTES, notes)

    def get_timetable(self, timetable_id: str) -> Optional[StudyTimetable]:
        return find_timetable(self.load_timetables(), timetable_id)

    def put_timetable(self, timetable: StudyTimetable) -> List[StudyTimetable]:
        timetables = upsert_timetable(self.load_timetables(), timetable)
        self.save_timetables(timetables)
        return timetables

    def delete_timetable(self, timetable_id: str) -> List[StudyTimetable]:
        timetables = remove_timetable(self.load_timetables(), timetable_id)
        self.save_timetables(timetables)
        return timetables

    def load_state(self) -> AppState:
        return AppState(
            subjects=self.load_subjects(),
            timetables=self.load_timetables(),
            assignments=self.load_assignments(),
            notes=self.load_notes(),
        )
