"""Merge server-confirmed workouts with the local pending queue."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Set

from wt_cli.core.models import (
    PendingWorkout,
    ValidationError,
    Workout,
    WorkoutPayload,
    timestamp_to_datetime,
)


def pending_to_workout(pending: PendingWorkout) -> Workout:
    """Map a queued entry to the displayed workout shape, tagged unsynced."""
    try:
        payload = WorkoutPayload.from_dict(pending.data)
    except ValidationError:
        # Queue entries are validated on enqueue; keep whatever fields exist.
        payload = WorkoutPayload(
            date=str(pending.data.get("date") or ""),
            type=str(pending.data.get("type") or ""),
            exercises=[],
            notes=str(pending.data.get("notes") or ""),
        )
    created = timestamp_to_datetime(pending.timestamp)
    return Workout(
        id=pending.id,
        user_id=pending.id,
        date=payload.date,
        type=payload.type,
        notes=payload.notes,
        exercises=payload.exercises,
        plan_id=payload.plan_id,
        synced=False,
        created_at=created,
        updated_at=created,
    )


def _unique(workouts: Iterable[Workout]) -> List[Workout]:
    seen: Set[str] = set()
    result: List[Workout] = []
    for workout in workouts:
        if workout.id in seen:
            continue
        seen.add(workout.id)
        result.append(workout)
    return result


def merge_workouts(server: Sequence[Workout], pending: Sequence[PendingWorkout]) -> List[Workout]:
    """Pending entries first, then server workouts; each id appears once."""
    if not pending:
        return _unique(server)
    return _unique([*(pending_to_workout(item) for item in pending), *server])


def absorb_pending(current: Sequence[Workout], pending: Sequence[PendingWorkout]) -> List[Workout]:
    """Prepend pending entries that the current list does not show yet."""
    existing = {workout.id for workout in current}
    fresh = [pending_to_workout(item) for item in pending if item.id not in existing]
    if not fresh:
        return list(current)
    return [*fresh, *current]
