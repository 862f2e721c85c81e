from __future__ import annotations
import re
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

Activity = Literal["study", "break", "meal", "exercise", "free", "sleep"]
StudyTimePreference = Literal["morning", "afternoon", "evening", "night"]
Priority = Literal["low", "medium", "high"]
DayOfWeek = Literal[
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]

DAYS_OF_WEEK = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
)
DAY_LABELS = {
    "monday": "Mon",
    "tuesday": "Tue",
    "wednesday": "Wed",
    "thursday": "Thu",
    "friday": "Fri",
    "saturday": "Sat",
    "sunday": "Sun",
}
DAY_FULL_LABELS = {day: day.capitalize() for day in DAYS_OF_WEEK}

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_clock(text: str) -> int:
    """
    Convert an HH:MM clock string to minutes since midnight.
    """
    match = _CLOCK_RE.match(str(text).strip())
    if not match:
        raise ValueError(f"Invalid time '{text}', expected HH:MM.")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time '{text}', expected 00:00-23:59.")
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    hours = (minutes // 60) % 24
    mins = minutes % 60
    return f"{hours:02d}:{mins:02d}"


def _normalize_clock(value: str) -> str:
    return format_clock(parse_clock(value))


class TimeSlot(BaseModel):
    id: str
    start_time: str
    end_time: str
    activity: Activity
    subject: Optional[str] = None
    label: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _clock(cls, v: str) -> str:
        return _normalize_clock(v)

    @property
    def start_minutes(self) -> int:
        return parse_clock(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_clock(self.end_time)

    @property
    def duration_minutes(self) -> int:
        # manual slots may wrap past midnight
        return (self.end_minutes - self.start_minutes) % MINUTES_PER_DAY


class DailyRoutine(BaseModel):
    wake_up_time: str = "06:00"
    sleep_time: str = "22:00"
    breakfast_time: str = "07:00"
    lunch_time: str = "12:30"
    dinner_time: str = "19:00"
    exercise_time: Optional[str] = "17:00"
    study_hours_per_day: float = Field(default=6, ge=0, le=24)
    preferred_study_time: StudyTimePreference = "morning"

    @field_validator(
        "wake_up_time", "sleep_time", "breakfast_time", "lunch_time", "dinner_time"
    )
    @classmethod
    def _clock(cls, v: str) -> str:
        return _normalize_clock(v)

    @field_validator("exercise_time", mode="before")
    @classmethod
    def _optional_clock(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        return _normalize_clock(v)

    @field_validator("study_hours_per_day")
    @classmethod
    def _half_hours(cls, v: float) -> float:
        if (v * 2) != int(v * 2):
            raise ValueError("Study hours must be a multiple of 0.5.")
        return v


class StudyTimetable(BaseModel):
    id: str
    name: str
    routine: DailyRoutine
    subjects: List[str] = Field(default_factory=list)
    weekly_schedule: Dict[DayOfWeek, List[TimeSlot]] = Field(default_factory=dict)
    active_days: List[DayOfWeek] = Field(default_factory=list)
    created_at: datetime


class Subject(BaseModel):
    id: str
    name: str
    color: str = "#3b82f6"


class Assignment(BaseModel):
    id: str
    title: str
    subject: str
    due_date: date
    description: str = ""
    priority: Priority = "medium"
    completed: bool = False


class Note(BaseModel):
    id: str
    title: str
    content: str = ""
    created_at: datetime
    updated_at: datetime


class AppState(BaseModel):
    subjects: List[Subject] = Field(default_factory=list)
    timetables: List[StudyTimetable] = Field(default_factory=list)
    assignments: List[Assignment] = Field(default_factory=list)
    notes: List[Note] = Field(default_factory=list)
