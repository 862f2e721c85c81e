"""Tests for planner: day slot generation and the weekly scheduler."""

from datetime import datetime

import pytest

from models import DailyRoutine, parse_clock
from planner import (
    activity_minutes,
    build_weekly_schedule,
    create_timetable,
    generate_day_slots,
    study_minutes_by_subject,
    weekly_study_minutes,
)


def _shape(slots):
    return [(s.start_time, s.end_time, s.activity, s.subject, s.label) for s in slots]


def _study(slots):
    return [s for s in slots if s.activity == "study"]


def _assert_tiles_day(slots, routine):
    assert slots[0].start_minutes == parse_clock(routine.wake_up_time)
    assert slots[-1].end_minutes == parse_clock(routine.sleep_time)
    for prev, nxt in zip(slots, slots[1:]):
        assert prev.end_minutes == nxt.start_minutes
    for s in slots:
        assert s.start_minutes < s.end_minutes


ROUTINES = [
    DailyRoutine(),
    DailyRoutine(exercise_time=None, study_hours_per_day=12),
    DailyRoutine(wake_up_time="09:15", sleep_time="23:45", breakfast_time="09:30"),
    DailyRoutine(lunch_time="12:30", exercise_time="12:45"),
    DailyRoutine(breakfast_time="05:00", dinner_time="23:00", study_hours_per_day=3.5),
    DailyRoutine(wake_up_time="06:00", sleep_time="09:00", study_hours_per_day=8),
    DailyRoutine(dinner_time="21:45"),
    DailyRoutine(breakfast_time="06:00", lunch_time="06:30", dinner_time="07:00", exercise_time=None),
]


# ---------------------------------------------------------------------------
# generate_day_slots
# ---------------------------------------------------------------------------


class TestGenerateDaySlots:
    def test_first_gap_truncates_break_at_breakfast(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        assert _shape(slots[:3]) == [
            ("06:00", "06:50", "study", "Math", None),
            ("06:50", "07:00", "break", None, "Short Break"),
            ("07:00", "07:30", "meal", None, "Breakfast"),
        ]

    def test_default_day_contains_every_anchor(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        anchors = [(s.start_time, s.end_time, s.label) for s in slots if s.activity in ("meal", "exercise")]
        assert anchors == [
            ("07:00", "07:30", "Breakfast"),
            ("12:30", "13:00", "Lunch"),
            ("17:00", "18:00", "Exercise"),
            ("19:00", "19:30", "Dinner"),
        ]

    def test_gap_too_short_for_study_becomes_free_time(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        before_lunch = [s for s in slots if s.end_time == "12:30"]
        assert _shape(before_lunch) == [("11:50", "12:30", "free", None, "Free Time")]

    def test_evening_after_budget_is_free_time(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        assert _shape(slots[-1:]) == [("19:30", "22:00", "free", None, "Free Time")]

    @pytest.mark.parametrize("routine_case", ROUTINES)
    def test_slots_tile_the_waking_day(self, routine_case):
        slots = generate_day_slots(routine_case, ["Math", "Physics", "Chemistry"])
        _assert_tiles_day(slots, routine_case)

    @pytest.mark.parametrize("routine_case", ROUTINES)
    def test_study_never_exceeds_budget(self, routine_case):
        slots = generate_day_slots(routine_case, ["Math"])
        total = sum(s.duration_minutes for s in _study(slots))
        assert total <= routine_case.study_hours_per_day * 60

    def test_study_budget_is_met_when_day_has_room(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        assert sum(s.duration_minutes for s in _study(slots)) == 360

    def test_sessions_are_at_most_fifty_minutes(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        durations = [s.duration_minutes for s in _study(slots)]
        assert max(durations) == 50
        # 360 = 7 full sessions plus a 10 minute remainder
        assert durations == [50] * 7 + [10]

    def test_short_day_drops_excess_study(self):
        routine = DailyRoutine(
            wake_up_time="06:00", sleep_time="09:00", study_hours_per_day=8
        )
        slots = generate_day_slots(routine, ["Math"])
        _assert_tiles_day(slots, routine)
        assert 0 < sum(s.duration_minutes for s in _study(slots)) < 8 * 60

    def test_round_robin_assignment(self, routine):
        subjects = ["Math", "Physics", "Chemistry"]
        study = _study(generate_day_slots(routine, subjects))
        assert len(study) > len(subjects)
        for i, slot in enumerate(study):
            assert slot.subject == subjects[i % len(subjects)]

    def test_no_subjects_means_no_study(self, routine):
        slots = generate_day_slots(routine, [])
        assert {s.activity for s in slots} <= {"meal", "exercise", "free"}
        _assert_tiles_day(slots, routine)

    def test_zero_hours_means_no_study(self):
        routine = DailyRoutine(study_hours_per_day=0)
        slots = generate_day_slots(routine, ["Math"])
        assert _study(slots) == []
        assert "break" not in {s.activity for s in slots}
        _assert_tiles_day(slots, routine)

    def test_sleep_before_wake_is_empty(self):
        routine = DailyRoutine(wake_up_time="22:00", sleep_time="06:00")
        assert generate_day_slots(routine, ["Math"]) == []

    def test_sleep_equal_to_wake_is_empty(self):
        routine = DailyRoutine(wake_up_time="08:00", sleep_time="08:00")
        assert generate_day_slots(routine, ["Math"]) == []

    def test_anchors_outside_waking_hours_are_dropped(self):
        routine = DailyRoutine(breakfast_time="05:00", dinner_time="23:00")
        labels = {s.label for s in generate_day_slots(routine, ["Math"])}
        assert "Breakfast" not in labels
        assert "Dinner" not in labels
        assert "Lunch" in labels

    def test_anchor_overlapped_by_earlier_anchor_is_dropped(self):
        routine = DailyRoutine(lunch_time="12:30", exercise_time="12:45")
        slots = generate_day_slots(routine, ["Math"])
        assert "Exercise" not in {s.label for s in slots}
        _assert_tiles_day(slots, routine)

    def test_anchor_is_clipped_at_sleep(self):
        routine = DailyRoutine(dinner_time="21:45")
        slots = generate_day_slots(routine, ["Math"])
        assert _shape(slots[-1:]) == [("21:45", "22:00", "meal", None, "Dinner")]

    def test_without_exercise(self):
        routine = DailyRoutine(exercise_time=None)
        slots = generate_day_slots(routine, ["Math"])
        assert "exercise" not in {s.activity for s in slots}

    def test_preferred_study_time_does_not_change_output(self):
        morning = generate_day_slots(DailyRoutine(preferred_study_time="morning"), ["Math"])
        night = generate_day_slots(DailyRoutine(preferred_study_time="night"), ["Math"])
        assert _shape(morning) == _shape(night)

    def test_slot_ids_are_unique(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        assert len({s.id for s in slots}) == len(slots)


# ---------------------------------------------------------------------------
# build_weekly_schedule / create_timetable
# ---------------------------------------------------------------------------


class TestBuildWeeklySchedule:
    def test_days_are_identical_except_ids(self, routine):
        schedule = build_weekly_schedule(routine, ["Math", "Physics"], ["monday", "wednesday"])
        assert list(schedule) == ["monday", "wednesday"]
        assert _shape(schedule["monday"]) == _shape(schedule["wednesday"])
        monday_ids = {s.id for s in schedule["monday"]}
        assert monday_ids.isdisjoint({s.id for s in schedule["wednesday"]})

    def test_round_robin_restarts_each_day(self, routine):
        schedule = build_weekly_schedule(routine, ["Math", "Physics", "Chemistry"], ["friday", "monday"])
        for slots in schedule.values():
            assert _study(slots)[0].subject == "Math"

    def test_preserves_day_order(self, routine):
        schedule = build_weekly_schedule(routine, ["Math"], ["sunday", "tuesday", "friday"])
        assert list(schedule) == ["sunday", "tuesday", "friday"]

    def test_duplicate_days_collapse(self, routine):
        schedule = build_weekly_schedule(routine, ["Math"], ["monday", "monday"])
        assert list(schedule) == ["monday"]

    def test_unknown_day(self, routine):
        with pytest.raises(ValueError, match="Unknown day"):
            build_weekly_schedule(routine, ["Math"], ["someday"])


class TestCreateTimetable:
    def test_creates_timetable(self, routine):
        now = datetime(2026, 10, 18, 9, 30)
        tt = create_timetable("  Exam Prep ", routine, ["Math", "Physics"], ["monday", "wednesday"], now=now)
        assert tt.name == "Exam Prep"
        assert tt.subjects == ["Math", "Physics"]
        assert tt.active_days == ["monday", "wednesday"]
        assert list(tt.weekly_schedule) == ["monday", "wednesday"]
        assert tt.created_at == now
        assert tt.routine == routine
        assert tt.id

    def test_ids_differ_between_timetables(self, routine):
        a = create_timetable("A", routine, ["Math"], ["monday"])
        b = create_timetable("B", routine, ["Math"], ["monday"])
        assert a.id != b.id

    def test_requires_subjects(self, routine):
        with pytest.raises(ValueError, match="subject"):
            create_timetable("Plan", routine, [], ["monday"])

    @pytest.mark.parametrize("name", ["", "   "])
    def test_requires_name(self, routine, name):
        with pytest.raises(ValueError, match="name"):
            create_timetable(name, routine, ["Math"], ["monday"])

    def test_requires_days(self, routine):
        with pytest.raises(ValueError, match="day"):
            create_timetable("Plan", routine, ["Math"], [])

    def test_subjects_checked_before_name(self, routine):
        with pytest.raises(ValueError, match="subject"):
            create_timetable("", routine, [], [])

    def test_known_subjects(self, routine):
        with pytest.raises(ValueError, match="Unknown subjects: Art"):
            create_timetable("Plan", routine, ["Math", "Art"], ["monday"], known_subjects=["Math"])
        tt = create_timetable("Plan", routine, ["Math"], ["monday"], known_subjects=["Math", "Art"])
        assert tt.subjects == ["Math"]

    def test_does_not_generate_on_validation_failure(self, routine, monkeypatch):
        import planner

        calls = []
        monkeypatch.setattr(planner, "build_weekly_schedule", lambda *a: calls.append(a))
        with pytest.raises(ValueError):
            create_timetable("", routine, ["Math"], ["monday"])
        assert calls == []


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class TestStatistics:
    def test_study_minutes_by_subject(self, routine):
        slots = generate_day_slots(routine, ["Math", "Physics"])
        totals = study_minutes_by_subject(slots)
        # Math gets sessions 1,3,5,7 and Physics 2,4,6 plus the 10 minute remainder
        assert totals == {"Math": 200, "Physics": 160}

    def test_activity_minutes_cover_the_day(self, routine):
        slots = generate_day_slots(routine, ["Math"])
        totals = activity_minutes(slots)
        assert sum(totals.values()) == 16 * 60
        assert totals["meal"] == 90
        assert totals["exercise"] == 60

    def test_weekly_study_minutes(self, routine):
        tt = create_timetable("Plan", routine, ["Math", "Physics"], ["monday", "tuesday"])
        assert weekly_study_minutes(tt) == {"Math": 400, "Physics": 320}
