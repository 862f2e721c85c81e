from __future__ import annotations
import logging
from datetime import datetime
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence
from uuid import uuid4
from models import (
    DAYS_OF_WEEK,
    DailyRoutine,
    StudyTimetable,
    TimeSlot,
    format_clock,
    parse_clock,
)

logger = logging.getLogger(__name__)

STUDY_SESSION_MINUTES = 50
BREAK_MINUTES = 15
MEAL_MINUTES = 30
EXERCISE_MINUTES = 60
LOOKAHEAD_MINUTES = 60


class _FixedEvent(NamedTuple):
    start: int
    duration: int
    activity: str
    label: str


def new_slot_id() -> str:
    return str(uuid4())


def _make_slot(
    start: int,
    end: int,
    activity: str,
    subject: Optional[str] = None,
    label: Optional[str] = None,
) -> TimeSlot:
    return TimeSlot(
        id=new_slot_id(),
        start_time=format_clock(start),
        end_time=format_clock(end),
        activity=activity,
        subject=subject,
        label=label,
    )


def _fixed_events(routine: DailyRoutine) -> List[_FixedEvent]:
    events = [
        _FixedEvent(parse_clock(routine.breakfast_time), MEAL_MINUTES, "meal", "Breakfast"),
        _FixedEvent(parse_clock(routine.lunch_time), MEAL_MINUTES, "meal", "Lunch"),
        _FixedEvent(parse_clock(routine.dinner_time), MEAL_MINUTES, "meal", "Dinner"),
    ]
    if routine.exercise_time:
        events.append(
            _FixedEvent(parse_clock(routine.exercise_time), EXERCISE_MINUTES, "exercise", "Exercise")
        )
    # stable: anchors sharing a start keep meal-before-exercise order
    events.sort(key=lambda e: e.start)
    return events


def generate_day_slots(routine: DailyRoutine, subjects: Sequence[str]) -> List[TimeSlot]:
    """
    Greedily pack one day between wake-up and sleep time.

    Meals and exercise are fixed anchors. Study sessions of up to 50 minutes,
    each followed by a short break, fill the room between them and rotate
    through ``subjects`` in order. Whatever cannot hold a study session
    becomes free time, so the returned slots tile the waking day exactly.
    """
    subjects = list(subjects)
    slots: List[TimeSlot] = []
    current = parse_clock(routine.wake_up_time)
    sleep = parse_clock(routine.sleep_time)
    study_remaining = int(round(routine.study_hours_per_day * 60))
    subject_index = 0

    events = [e for e in _fixed_events(routine) if e.start < sleep]
    pending = 0  # next unconsumed anchor

    while current < sleep:
        while pending < len(events) and events[pending].start < current:
            logger.debug(
                "Dropping %s at %s: day already filled to %s",
                events[pending].label,
                format_clock(events[pending].start),
                format_clock(current),
            )
            pending += 1
        upcoming = events[pending] if pending < len(events) else None
        limit = sleep if upcoming is None else upcoming.start
        session = min(STUDY_SESSION_MINUTES, study_remaining)
        can_study = session > 0 and bool(subjects)

        if upcoming is not None and upcoming.start < current + LOOKAHEAD_MINUTES:
            gap = upcoming.start - current
            if gap > 0 and can_study and gap >= session:
                subject = subjects[subject_index % len(subjects)]
                slots.append(_make_slot(current, current + session, "study", subject=subject))
                current += session
                study_remaining -= session
                subject_index += 1

                pause = min(BREAK_MINUTES, upcoming.start - current)
                if pause > 0:
                    slots.append(_make_slot(current, current + pause, "break", label="Short Break"))
                    current += pause
            elif gap > 0:
                slots.append(_make_slot(current, upcoming.start, "free", label="Free Time"))
                current = upcoming.start

            if current == upcoming.start:
                end = min(upcoming.start + upcoming.duration, sleep)
                slots.append(_make_slot(current, end, upcoming.activity, label=upcoming.label))
                current = end
                pending += 1
        elif can_study and current + session <= limit:
            subject = subjects[subject_index % len(subjects)]
            slots.append(_make_slot(current, current + session, "study", subject=subject))
            current += session
            study_remaining -= session
            subject_index += 1

            pause = min(BREAK_MINUTES, limit - current)
            if pause > 0 and study_remaining > 0:
                slots.append(_make_slot(current, current + pause, "break", label="Short Break"))
                current += pause
        else:
            if limit <= current:
                break
            slots.append(_make_slot(current, limit, "free", label="Free Time"))
            current = limit

    if study_remaining > 0 and subjects:
        logger.debug("%d study minutes did not fit into the day", study_remaining)
    return slots


def build_weekly_schedule(
    routine: DailyRoutine,
    subjects: Sequence[str],
    active_days: Iterable[str],
) -> Dict[str, List[TimeSlot]]:
    schedule: Dict[str, List[TimeSlot]] = {}
    for day in active_days:
        if day not in DAYS_OF_WEEK:
            raise ValueError(f"Unknown day '{day}'.")
        if day in schedule:
            continue
        schedule[day] = generate_day_slots(routine, subjects)
    return schedule


def create_timetable(
    name: str,
    routine: DailyRoutine,
    subjects: Sequence[str],
    active_days: Sequence[str],
    known_subjects: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> StudyTimetable:
    subjects = list(subjects)
    if not subjects:
        raise ValueError("Please select at least one subject.")
    if not name or not name.strip():
        raise ValueError("Please enter a name for your timetable.")
    if not active_days:
        raise ValueError("Please select at least one day.")
    if known_subjects is not None:
        known = set(known_subjects)
        missing = [s for s in subjects if s not in known]
        if missing:
            raise ValueError(f"Unknown subjects: {', '.join(missing)}.")

    schedule = build_weekly_schedule(routine, subjects, active_days)
    timetable = StudyTimetable(
        id=str(uuid4()),
        name=name.strip(),
        routine=routine,
        subjects=subjects,
        weekly_schedule=schedule,
        active_days=list(schedule.keys()),
        created_at=now or datetime.now(),
    )
    logger.info(
        "Generated timetable '%s' for %d day(s), %d subject(s)",
        timetable.name,
        len(timetable.active_days),
        len(subjects),
    )
    return timetable


def study_minutes_by_subject(slots: Iterable[TimeSlot]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for slot in slots:
        if slot.activity != "study":
            continue
        key = slot.subject or "Study"
        totals[key] = totals.get(key, 0) + slot.duration_minutes
    return totals


def activity_minutes(slots: Iterable[TimeSlot]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for slot in slots:
        totals[slot.activity] = totals.get(slot.activity, 0) + slot.duration_minutes
    return totals


def weekly_study_minutes(timetable: StudyTimetable) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for slots in timetable.weekly_schedule.values():
        for subject, minutes in study_minutes_by_subject(slots).items():
            totals[subject] = totals.get(subject, 0) + minutes
    return totals
