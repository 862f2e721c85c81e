from __future__ import annotations
import logging
from datetime import datetime
from typing import List, Optional
from uuid import uuid4
from pydantic import TypeAdapter, ValidationError
from models import Note

logger = logging.getLogger(__name__)

_NOTES = TypeAdapter(List[Note])


def _check_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValueError("Please enter a note title.")
    return title


def create_note(title: str, content: str = "", now: Optional[datetime] = None) -> Note:
    now = now or datetime.now()
    return Note(
        id=str(uuid4()),
        title=_check_title(title),
        content=content,
        created_at=now,
        updated_at=now,
    )


def add_note(notes: List[Note], note: Note) -> List[Note]:
    # Newest first
    return [note] + list(notes)


def find_note(notes: List[Note], note_id: str) -> Optional[Note]:
    return next((n for n in notes if n.id == note_id), None)


def update_note(
    notes: List[Note],
    note_id: str,
    title: Optional[str] = None,
    content: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Note]:
    changes = {}
    if title is not None:
        changes["title"] = _check_title(title)
    if content is not None:
        changes["content"] = content
    if not changes:
        return list(notes)
    changes["updated_at"] = now or datetime.now()
    return [n.model_copy(update=changes) if n.id == note_id else n for n in notes]


def delete_note(notes: List[Note], note_id: str) -> List[Note]:
    return [n for n in notes if n.id != note_id]


def search_notes(notes: List[Note], query: str) -> List[Note]:
    """
    Case-insensitive substring match on title or content. A blank query
    matches everything.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(notes)
    return [n for n in notes if needle in n.title.lower() or needle in n.content.lower()]


def notes_to_json(notes: List[Note]) -> str:
    return _NOTES.dump_json(list(notes), indent=2).decode("utf-8")


def import_notes(notes: List[Note], text: str | bytes) -> List[Note]:
    """
    Parse a JSON export and put the imported notes ahead of the existing
    ones. Imported notes whose id is already taken get a fresh id.
    """
    try:
        imported = _NOTES.validate_json(text)
    except ValidationError as exc:
        logger.warning("Rejected notes import (%d error(s))", exc.error_count())
        raise ValueError("Invalid file format.") from exc

    taken = {n.id for n in notes}
    fresh = []
    for note in imported:
        if note.id in taken:
            note = note.model_copy(update={"id": str(uuid4())})
        taken.add(note.id)
        fresh.append(note)
    logger.info("Imported %d note(s)", len(fresh))
    return fresh + list(notes)
