from __future__ import annotations

from typing import Any, Dict

from wt_cli.core.models import PendingWorkout, Workout
from wt_cli.core.reconcile import absorb_pending, merge_workouts, pending_to_workout


def _pending(workout_form: Dict[str, Any], entry_id: str = "offline-1") -> PendingWorkout:
    return PendingWorkout(id=entry_id, data={**workout_form, "synced": False}, timestamp=1_772_400_000_000)


def test_pending_to_workout_is_unsynced(workout_form) -> None:
    workout = pending_to_workout(_pending(workout_form))
    assert workout.id == "offline-1"
    assert workout.synced is False
    assert workout.type == "push"
    assert workout.created_at is not None
    assert workout.created_at == workout.updated_at


def test_pending_to_workout_tolerates_partial_data() -> None:
    workout = pending_to_workout(PendingWorkout(id="offline-2", data={"type": "legs"}, timestamp=0))
    assert workout.type == "legs"
    assert workout.exercises == []


def test_merge_puts_pending_first(workout_form, server_workout) -> None:
    server = [Workout.from_api(server_workout)]
    merged = merge_workouts(server, [_pending(workout_form)])
    assert [w.id for w in merged] == ["offline-1", "srv-100"]
    assert [w.synced for w in merged] == [False, True]


def test_merge_without_pending_returns_server(server_workout) -> None:
    server = [Workout.from_api(server_workout)]
    assert [w.id for w in merge_workouts(server, [])] == ["srv-100"]


def test_merge_is_idempotent(workout_form, server_workout) -> None:
    pending = [_pending(workout_form), _pending(workout_form, "offline-2")]
    once = merge_workouts([Workout.from_api(server_workout)], pending)
    twice = merge_workouts(once, pending)
    assert [w.id for w in twice] == [w.id for w in once]
    assert len({w.id for w in twice}) == len(twice)


def test_merge_deduplicates_server_ids(server_workout) -> None:
    workout = Workout.from_api(server_workout)
    assert len(merge_workouts([workout, workout], [])) == 1


def test_absorb_pending_adds_only_new(workout_form, server_workout) -> None:
    current = merge_workouts([Workout.from_api(server_workout)], [_pending(workout_form)])
    pending = [_pending(workout_form), _pending(workout_form, "offline-2")]

    result = absorb_pending(current, pending)

    assert [w.id for w in result] == ["offline-2", "offline-1", "srv-100"]
    assert absorb_pending(result, pending) == result
