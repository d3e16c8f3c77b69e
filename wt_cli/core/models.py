"""Data models shared by the API client, local stores and views.

Parsing helpers (``from_dict``/``from_api``) validate JSON coming from the
server or from local storage and raise :class:`ValidationError` on shape
problems, so nothing downstream has to trust raw dictionaries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from wt_cli.core.constants import DEFAULT_FOOD_GOALS, PLAN_STATUSES, VALID_BANDS

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


class ValidationError(ValueError):
    """Raised when workout data or an API payload has an invalid shape."""


def _int_field(raw: Any, label: str, exercise: str) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f'Invalid {label} value for exercise "{exercise}"') from exc
    if value < 0:
        raise ValidationError(f'Invalid {label} value for exercise "{exercise}"')
    return value


def _float_field(raw: Any, label: str, exercise: str) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f'Invalid {label} value for exercise "{exercise}"') from exc
    if value < 0:
        raise ValidationError(f'Invalid {label} value for exercise "{exercise}"')
    return value


@dataclass
class WorkoutSet:
    """One performed set."""

    reps: int = 0
    rest: int = 0
    weight: Optional[float] = None
    hold: Optional[int] = None
    band: Optional[str] = None
    is_max: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], exercise: str = "") -> "WorkoutSet":
        if not isinstance(data, dict):
            raise ValidationError(f'Set for exercise "{exercise}" must be an object')

        rest = _int_field(data.get("rest"), "rest", exercise) or 0
        weight = _float_field(data.get("weight"), "weight", exercise)
        hold = _int_field(data.get("hold"), "hold", exercise)
        is_max = data.get("isMax") is True

        band = data.get("band") or None
        if band is not None and band not in VALID_BANDS:
            raise ValidationError(f'Invalid band value for exercise "{exercise}"')

        # A timed hold replaces repetitions.
        if hold is not None and hold > 0:
            reps = 0
        else:
            reps = _int_field(data.get("reps"), "reps", exercise) or 0

        return cls(reps=reps, rest=rest, weight=weight, hold=hold, band=band, is_max=is_max)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"reps": self.reps, "rest": self.rest}
        if self.weight is not None:
            payload["weight"] = self.weight
        if self.hold is not None:
            payload["hold"] = self.hold
        if self.band:
            payload["band"] = self.band
        if self.is_max:
            payload["isMax"] = True
        return payload


@dataclass
class Exercise:
    """Exercise with its list of sets."""

    name: str
    sets: List[WorkoutSet] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exercise":
        if not isinstance(data, dict):
            raise ValidationError("Exercise must be an object")
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationError("Exercise name is required")
        raw_sets = data.get("sets") or []
        if not isinstance(raw_sets, list):
            raise ValidationError(f'Sets for exercise "{name}" must be a list')
        return cls(name=name, sets=[WorkoutSet.from_dict(item, name) for item in raw_sets])

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "sets": [item.to_dict() for item in self.sets]}


def _parse_exercises(raw: Any) -> List[Exercise]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("exercises must be a list")
    return [Exercise.from_dict(item) for item in raw]


@dataclass
class WorkoutPayload:
    """Workout form data as submitted by the user."""

    date: str
    type: str
    exercises: List[Exercise]
    notes: str = ""
    plan_id: Optional[str] = None
    synced: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkoutPayload":
        """Validate form data before it reaches the network or the queue."""
        if not isinstance(data, dict):
            raise ValidationError("Workout must be an object")

        date_text = str(data.get("date") or "").strip()
        if not _DATE_RE.match(date_text):
            raise ValidationError("Workout date is required (YYYY-MM-DD)")
        workout_type = str(data.get("type") or "").strip()
        if not workout_type:
            raise ValidationError("Workout type is required")

        exercises = _parse_exercises(data.get("exercises"))
        if not exercises:
            raise ValidationError("At least one exercise is required")

        return cls(
            date=date_text[:10],
            type=workout_type,
            exercises=exercises,
            notes=str(data.get("notes") or ""),
            plan_id=data.get("planId") or None,
            synced=bool(data.get("synced", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "date": self.date,
            "type": self.type,
            "notes": self.notes,
            "synced": self.synced,
            "exercises": [item.to_dict() for item in self.exercises],
        }
        if self.plan_id:
            payload["planId"] = self.plan_id
        return payload


@dataclass
class PendingWorkout:
    """Workout recorded locally and not yet acknowledged by the server."""

    id: str
    data: Dict[str, Any]
    timestamp: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingWorkout":
        if not isinstance(data, dict):
            raise ValidationError("Pending workout must be an object")
        try:
            return cls(
                id=str(data["id"]),
                data=dict(data["data"]),
                timestamp=int(data["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed pending workout: {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "data": self.data, "timestamp": self.timestamp}


def timestamp_to_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    text = str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp: {raw}") from exc


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Workout:
    """Workout as displayed: server-confirmed or a pending local entry."""

    id: str
    date: str
    type: str
    exercises: List[Exercise]
    synced: bool = True
    notes: str = ""
    user_id: Optional[str] = None
    plan_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Workout":
        """Parse one workout object returned by ``GET /api/workouts``."""
        if not isinstance(data, dict):
            raise ValidationError("Workout must be an object")
        workout_id = data.get("_id")
        if not workout_id:
            raise ValidationError("Workout is missing _id")
        return cls(
            id=str(workout_id),
            date=str(data.get("date") or "")[:10],
            type=str(data.get("type") or ""),
            exercises=_parse_exercises(data.get("exercises")),
            synced=bool(data.get("synced", True)),
            notes=str(data.get("notes") or ""),
            user_id=str(data["userId"]) if data.get("userId") else None,
            plan_id=str(data["planId"]) if data.get("planId") else None,
            created_at=_parse_datetime(data.get("createdAt")),
            updated_at=_parse_datetime(data.get("updatedAt")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "userId": self.user_id,
            "date": self.date,
            "type": self.type,
            "notes": self.notes,
            "synced": self.synced,
            "planId": self.plan_id,
            "exercises": [item.to_dict() for item in self.exercises],
            "createdAt": _format_datetime(self.created_at),
            "updatedAt": _format_datetime(self.updated_at),
        }

    def apply(self, payload: WorkoutPayload) -> "Workout":
        """Return a copy with form data applied (used for offline edits)."""
        return Workout(
            id=self.id,
            date=payload.date,
            type=payload.type,
            exercises=list(payload.exercises),
            synced=self.synced,
            notes=payload.notes,
            user_id=self.user_id,
            plan_id=payload.plan_id or self.plan_id,
            created_at=self.created_at,
            updated_at=datetime.now(timezone.utc),
        )


@dataclass
class TrainingPlan:
    """Named, dated grouping of workouts with a lifecycle status."""

    id: str
    name: str
    start_date: str
    status: str = "active"
    description: str = ""
    end_date: Optional[str] = None
    goal: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TrainingPlan":
        if not isinstance(data, dict):
            raise ValidationError("Training plan must be an object")
        plan_id = data.get("_id")
        name = data.get("name")
        if not plan_id or not name:
            raise ValidationError("Training plan is missing _id or name")
        status = str(data.get("status") or "active")
        if status not in PLAN_STATUSES:
            raise ValidationError(f"Unknown training plan status: {status}")
        return cls(
            id=str(plan_id),
            name=str(name),
            start_date=str(data.get("startDate") or "")[:10],
            status=status,
            description=str(data.get("description") or ""),
            end_date=str(data["endDate"])[:10] if data.get("endDate") else None,
            goal=data.get("goal") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "status": self.status,
            "goal": self.goal,
        }


@dataclass
class FoodGoals:
    """Daily macro targets."""

    carbs: float = DEFAULT_FOOD_GOALS["carbs"]
    protein: float = DEFAULT_FOOD_GOALS["protein"]
    fat: float = DEFAULT_FOOD_GOALS["fat"]
    calories: float = DEFAULT_FOOD_GOALS["calories"]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FoodGoals":
        if not isinstance(data, dict):
            raise ValidationError("Food goals must be an object")
        values: Dict[str, float] = {}
        for key, default in DEFAULT_FOOD_GOALS.items():
            raw = data.get(key, default)
            try:
                value = float(raw)
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"Invalid {key} goal: {raw!r}") from exc
            if value < 0:
                raise ValidationError(f"Invalid {key} goal: {raw!r}")
            values[key] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        return {
            "carbs": self.carbs,
            "protein": self.protein,
            "fat": self.fat,
            "calories": self.calories,
        }
