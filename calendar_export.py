from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import List, Tuple
from icalendar import Calendar, Event as IcsEvent
from models import DAYS_OF_WEEK, DAY_FULL_LABELS, StudyTimetable, TimeSlot


def _slot_summary(slot: TimeSlot) -> str:
    if slot.activity == "study":
        return f"Study: {slot.subject or 'Study'}"
    return slot.label or slot.activity.capitalize()


def _day_date(week_start: date, day: str) -> date:
    offset = (DAYS_OF_WEEK.index(day) - week_start.weekday()) % 7
    return week_start + timedelta(days=offset)


def timetable_to_ics(
    timetable: StudyTimetable,
    week_start: date,
) -> Tuple[bytes, List[str]]:
    """
    Export every slot as a weekly recurring event.

    Times are written as floating local times (no TZID). The first
    occurrence of each weekday falls within the seven days from week_start.
    """
    cal = Calendar()
    cal.add("PRODID", "-//Study Timetable//Local//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", timetable.name)

    warnings: List[str] = []
    for day, slots in timetable.weekly_schedule.items():
        day_date = _day_date(week_start, day)
        for slot in slots:
            start = slot.start_minutes
            end = slot.end_minutes
            if end <= start:
                warnings.append(
                    f"{DAY_FULL_LABELS[day]} {slot.start_time}-{slot.end_time} "
                    f"({_slot_summary(slot)}) crosses midnight and was skipped."
                )
                continue

            event = IcsEvent()
            event.add("uid", f"{timetable.id}-{slot.id}@study-timetable")
            event.add("summary", _slot_summary(slot))
            event.add("dtstart", datetime.combine(day_date, time.min) + timedelta(minutes=start))
            event.add("dtend", datetime.combine(day_date, time.min) + timedelta(minutes=end))
            event.add("rrule", {"freq": "weekly"})
            event.add("categories", [slot.activity])
            if slot.label and slot.activity == "study":
                event.add("description", slot.label)
            cal.add_component(event)

    return cal.to_ical(), warnings
