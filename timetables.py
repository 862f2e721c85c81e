from __future__ import annotations
import logging
from typing import Any, List, Mapping, Optional
from models import DAYS_OF_WEEK, StudyTimetable, TimeSlot, format_clock, parse_clock
from planner import STUDY_SESSION_MINUTES, new_slot_id

logger = logging.getLogger(__name__)

DEFAULT_SLOT_START = "09:00"


def _default_slot_fields(timetable: StudyTimetable) -> dict:
    start = parse_clock(DEFAULT_SLOT_START)
    return {
        "start_time": DEFAULT_SLOT_START,
        "end_time": format_clock(start + STUDY_SESSION_MINUTES),
        "activity": "study",
        "subject": timetable.subjects[0] if timetable.subjects else "Study",
    }


def day_slots(timetable: StudyTimetable, day: str) -> List[TimeSlot]:
    return list(timetable.weekly_schedule.get(day, []))


def add_slot(
    timetable: StudyTimetable,
    day: str,
    template: Optional[Mapping[str, Any]] = None,
) -> StudyTimetable:
    """
    Append a slot to the end of ``day``.

    The slot always gets a fresh id. It is neither sorted into place nor
    checked against the existing slots, so it may overlap them.
    """
    if day not in DAYS_OF_WEEK:
        raise ValueError(f"Unknown day '{day}'.")
    fields = dict(template) if template is not None else _default_slot_fields(timetable)
    fields.pop("id", None)
    slot = TimeSlot(id=new_slot_id(), **fields)

    updated = timetable.model_copy(deep=True)
    updated.weekly_schedule[day] = updated.weekly_schedule.get(day, []) + [slot]
    logger.info("Added %s slot %s-%s on %s", slot.activity, slot.start_time, slot.end_time, day)
    return updated


def update_slot(
    timetable: StudyTimetable,
    day: str,
    slot_id: str,
    updates: Mapping[str, Any],
) -> StudyTimetable:
    updated = timetable.model_copy(deep=True)
    slots = updated.weekly_schedule.get(day)
    if not slots:
        return updated

    for i, slot in enumerate(slots):
        if slot.id != slot_id:
            continue
        merged = slot.model_dump()
        merged.update({k: v for k, v in updates.items() if k != "id"})
        slots[i] = TimeSlot.model_validate(merged)
        break
    return updated


def delete_slot(timetable: StudyTimetable, day: str, slot_id: str) -> StudyTimetable:
    updated = timetable.model_copy(deep=True)
    if day in updated.weekly_schedule:
        updated.weekly_schedule[day] = [
            s for s in updated.weekly_schedule[day] if s.id != slot_id
        ]
    return updated


def find_timetable(
    timetables: List[StudyTimetable], timetable_id: str
) -> Optional[StudyTimetable]:
    for t in timetables:
        if t.id == timetable_id:
            return t
    return None


def upsert_timetable(
    timetables: List[StudyTimetable], timetable: StudyTimetable
) -> List[StudyTimetable]:
    if find_timetable(timetables, timetable.id) is None:
        return [timetable] + list(timetables)
    return [timetable if t.id == timetable.id else t for t in timetables]


def remove_timetable(
    timetables: List[StudyTimetable], timetable_id: str
) -> List[StudyTimetable]:
    return [t for t in timetables if t.id != timetable_id]
