"""File-backed local key-value storage and the stores built on it."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from wt_cli.core.constants import FOOD_GOALS_KEY, OFFLINE_ID_PREFIX, PENDING_WORKOUTS_KEY
from wt_cli.core.models import FoodGoals, PendingWorkout, ValidationError

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the local storage file cannot be read or written."""


class LocalStore:
    """JSON object on disk; every write replaces the whole file atomically."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text() or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read local storage {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Local storage {self.path} must contain a JSON object")
        return data

    def _dump(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".wt-storage-", suffix=".json", dir=self.path.parent)
        tmp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
                handle.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Cannot write local storage {self.path}: {exc}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> bool:
        data = self._load()
        if key not in data:
            return False
        del data[key]
        self._dump(data)
        return True


def new_offline_id() -> str:
    """Client-side id; the prefix keeps it apart from server-issued ids."""
    return f"{OFFLINE_ID_PREFIX}{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class PendingWorkoutStore:
    """Durable queue of workouts that have not reached the server yet."""

    def __init__(self, store: LocalStore, key: str = PENDING_WORKOUTS_KEY) -> None:
        self.store = store
        self.key = key

    def list(self) -> List[PendingWorkout]:
        raw = self.store.get(self.key, [])
        if not isinstance(raw, list):
            raise StorageError(f"Stored value for {self.key!r} is not a list")
        try:
            return [PendingWorkout.from_dict(item) for item in raw]
        except ValidationError as exc:
            raise StorageError(f"Corrupt pending workout queue: {exc}") from exc

    def replace(self, entries: Iterable[PendingWorkout]) -> None:
        self.store.set(self.key, [entry.to_dict() for entry in entries])

    def get(self, workout_id: str) -> Optional[PendingWorkout]:
        return next((entry for entry in self.list() if entry.id == workout_id), None)

    def __len__(self) -> int:
        return len(self.list())

    def enqueue(self, payload: Dict[str, Any]) -> PendingWorkout:
        entry = PendingWorkout(
            id=new_offline_id(),
            data={**payload, "synced": False},
            timestamp=int(time.time() * 1000),
        )
        self.replace([*self.list(), entry])
        logger.debug("Workout queued offline: %s", entry.id)
        return entry

    def update(self, workout_id: str, payload: Dict[str, Any]) -> bool:
        entries = self.list()
        found = False
        for entry in entries:
            if entry.id == workout_id:
                entry.data = {**payload, "synced": False}
                found = True
        if not found:
            logger.debug("Pending workout %s not found for update", workout_id)
            return False
        self.replace(entries)
        return True

    def remove(self, workout_id: str) -> bool:
        entries = self.list()
        remaining = [entry for entry in entries if entry.id != workout_id]
        if len(remaining) == len(entries):
            return False
        self.replace(remaining)
        logger.debug("Pending workout removed: %s", workout_id)
        return True


class SettingsStore:
    """Typed accessors for user settings kept in local storage."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    def get_food_goals(self) -> FoodGoals:
        raw = self.store.get(FOOD_GOALS_KEY)
        if raw is None:
            return FoodGoals()
        try:
            return FoodGoals.from_dict(raw)
        except ValidationError as exc:
            logger.error("Error parsing saved food goals, using defaults: %s", exc)
            return FoodGoals()

    def set_food_goals(self, goals: FoodGoals) -> None:
        self.store.set(FOOD_GOALS_KEY, goals.to_dict())
