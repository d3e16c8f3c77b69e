from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
import typer

from wt_cli.core.models import Exercise, WorkoutSet
from wt_cli.utils.dates import today_iso, validate_date
from wt_cli.utils.formatting import (
    format_exercises,
    format_rest,
    format_set,
    format_timestamp,
    sync_label,
)


def test_format_rest() -> None:
    assert format_rest(0) == "0s"
    assert format_rest(45) == "45s"
    assert format_rest(90) == "1:30"


def test_format_set_variants() -> None:
    assert format_set(WorkoutSet(reps=10)) == "10"
    assert format_set(WorkoutSet(reps=8, weight=40.0, rest=90)) == "8@40kg/1:30"
    assert format_set(WorkoutSet(weight=42.5, is_max=True)) == "max@42.5kg"
    assert format_set(WorkoutSet(hold=30, rest=30, band="green")) == "h30s/30s+green"


def test_format_exercises() -> None:
    exercises = [
        Exercise(name="Dips", sets=[WorkoutSet(reps=10), WorkoutSet(reps=8)]),
        Exercise(name="Rows", sets=[WorkoutSet(reps=12, rest=45)]),
    ]
    assert format_exercises(exercises) == "Dips 10, 8; Rows 12/45s"
    assert format_exercises([]) == "-"


def test_format_timestamp() -> None:
    assert format_timestamp(None) == "-"
    assert format_timestamp(datetime(2026, 3, 2, 18, 5, tzinfo=timezone.utc)) == "2026-03-02 18:05"


def test_sync_label() -> None:
    assert sync_label(True, plain=True) == "synced"
    assert sync_label(False, plain=True) == "pending"
    assert "pending" in sync_label(False)


def test_validate_date() -> None:
    assert validate_date(None) is None
    assert validate_date("2026-02-28") == "2026-02-28"
    with pytest.raises(typer.BadParameter):
        validate_date("2026-02-30")
    with pytest.raises(typer.BadParameter):
        validate_date("02/28/2026")


def test_today_iso() -> None:
    assert today_iso(date(2026, 3, 2)) == "2026-03-02"
