"""Shared test fixtures."""

import pytest

from models import DailyRoutine


@pytest.fixture
def routine():
    """The default routine: 06:00-22:00 with meals, exercise at 17:00, 6h study."""
    return DailyRoutine(
        wake_up_time="06:00",
        sleep_time="22:00",
        breakfast_time="07:00",
        lunch_time="12:30",
        dinner_time="19:00",
        exercise_time="17:00",
        study_hours_per_day=6,
    )


@pytest.fixture
def store(tmp_path):
    """Return a LocalStore backed by a temp directory."""
    from store import LocalStore
    return LocalStore(data_dir=tmp_path / "data")
