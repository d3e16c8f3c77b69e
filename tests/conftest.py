from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from wt_cli.core.api import APIError, NetworkError
from wt_cli.core.connectivity import ConnectivityMonitor
from wt_cli.core.models import TrainingPlan, Workout
from wt_cli.core.storage import LocalStore, PendingWorkoutStore
from wt_cli.core.sync import SyncEngine
from wt_cli.core.workouts import WorkoutClient


class FakeAPI:
    """In-memory stand-in for WorkoutTrackerAPI that records every call."""

    def __init__(
        self,
        workouts: Optional[List[Dict[str, Any]]] = None,
        plans: Optional[List[Dict[str, Any]]] = None,
        reachable: bool = True,
    ) -> None:
        self.workouts: List[Dict[str, Any]] = [dict(item) for item in workouts or []]
        self.plans: List[Dict[str, Any]] = [dict(item) for item in plans or []]
        self.reachable = reachable
        self.calls: List[tuple] = []
        self.fail_dates: set = set()
        self._next_id = 1

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))

    def network_calls(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "probe"]

    def probe(self, path: str = "/api/workouts", timeout: float = 5) -> bool:
        self._record("probe", path)
        return self.reachable

    def get_workouts(self, plan_id: Optional[str] = None) -> List[Workout]:
        self._record("get_workouts", plan_id)
        if not self.reachable:
            raise NetworkError("API request failed for GET /api/workouts: down")
        return [Workout.from_api(item) for item in self.workouts]

    def create_workout(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._record("create_workout", dict(payload))
        if not self.reachable:
            raise NetworkError("API request failed for POST /api/workouts: down")
        if payload.get("date") in self.fail_dates:
            raise APIError("API request failed for POST /api/workouts: boom", status_code=500)
        workout_id = f"srv-{self._next_id}"
        self._next_id += 1
        plan_id = payload.get("planId") or next(
            (plan["_id"] for plan in self.plans if plan.get("status") == "active"), None
        )
        self.workouts.insert(0, {**payload, "_id": workout_id, "planId": plan_id, "userId": "u1"})
        return {"workoutId": workout_id, "planId": plan_id}

    def update_workout(self, workout_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._record("update_workout", workout_id, dict(payload))
        if not self.reachable:
            raise NetworkError("API request failed for PUT /api/workouts: down")
        for item in self.workouts:
            if item["_id"] == workout_id:
                item.update(payload)
        return {"success": True}

    def delete_workout(self, workout_id: str) -> Dict[str, Any]:
        self._record("delete_workout", workout_id)
        if not self.reachable:
            raise NetworkError("API request failed for DELETE /api/workouts: down")
        self.workouts = [item for item in self.workouts if item["_id"] != workout_id]
        return {"success": True}

    def get_training_plans(self, active_only: bool = False) -> List[TrainingPlan]:
        self._record("get_training_plans", active_only)
        plans = [p for p in self.plans if p.get("status") == "active"] if active_only else self.plans
        return [TrainingPlan.from_api(item) for item in plans]

    def create_training_plan(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._record("create_training_plan", dict(payload))
        plan_id = f"plan-{len(self.plans) + 1}"
        self.plans.append({**payload, "_id": plan_id})
        return {"planId": plan_id}

    def update_training_plan(self, plan_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._record("update_training_plan", plan_id, dict(payload))
        return {"success": True}

    def delete_training_plan(self, plan_id: str) -> Dict[str, Any]:
        self._record("delete_training_plan", plan_id)
        return {"success": True}


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def workout_form() -> Dict[str, Any]:
    return {
        "date": "2026-03-02",
        "type": "push",
        "notes": "felt strong",
        "exercises": [
            {"name": "Push-ups", "sets": [{"reps": 12, "rest": 60}, {"reps": 10, "rest": 60}]},
            {"name": "Plank", "sets": [{"hold": 45, "rest": 30}]},
        ],
    }


@pytest.fixture()
def server_workout() -> Dict[str, Any]:
    return {
        "_id": "srv-100",
        "userId": "u1",
        "planId": "plan-1",
        "date": "2026-02-27T00:00:00.000Z",
        "type": "pull",
        "notes": "",
        "synced": True,
        "exercises": [{"name": "Pull-ups", "sets": [{"reps": 8, "rest": 90, "weight": 10}]}],
        "createdAt": "2026-02-27T18:00:00.000Z",
        "updatedAt": "2026-02-27T18:00:00.000Z",
    }


@pytest.fixture()
def plans() -> List[Dict[str, Any]]:
    return [
        {"_id": "plan-1", "name": "Spring block", "startDate": "2026-02-01", "status": "active"},
        {
            "_id": "plan-0",
            "name": "Winter base",
            "startDate": "2025-11-01",
            "endDate": "2026-01-31",
            "status": "completed",
        },
    ]


@pytest.fixture()
def fake_api(server_workout: Dict[str, Any], plans: List[Dict[str, Any]]) -> FakeAPI:
    return FakeAPI(workouts=[server_workout], plans=plans)


@pytest.fixture()
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "local-storage.json"


@pytest.fixture()
def pending_store(storage_path: Path) -> PendingWorkoutStore:
    return PendingWorkoutStore(LocalStore(storage_path))


@pytest.fixture()
def make_client(fake_api: FakeAPI, pending_store: PendingWorkoutStore) -> Callable[..., WorkoutClient]:
    """Build a view-model over the fake API; ``online`` drives the probe."""

    def _make(online: bool = True, sleep: Optional[Callable[[float], None]] = None) -> WorkoutClient:
        fake_api.reachable = online
        monitor = ConnectivityMonitor(probe=lambda: fake_api.reachable)
        monitor.check()
        engine = SyncEngine(
            api=fake_api,  # type: ignore[arg-type]
            store=pending_store,
            monitor=monitor,
            stabilize_delay=1.0,
            sleep=sleep or (lambda _: None),
        )
        return WorkoutClient(engine)

    return _make


@pytest.fixture()
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, fake_api: FakeAPI, storage_path: Path) -> FakeAPI:
    """Point the CLI at a temp config/storage and the fake API."""
    monkeypatch.setenv("WT_CONFIG_FILE", str(tmp_path / "config.toml"))
    monkeypatch.setenv("WT_STORAGE_FILE", str(storage_path))
    monkeypatch.delenv("WT_BASE_URL", raising=False)
    monkeypatch.delenv("WT_TOKEN", raising=False)
    monkeypatch.setattr("wt_cli.commands.common.WorkoutTrackerAPI", lambda **_: fake_api)
    return fake_api


@pytest.fixture()
def write_temp_json(tmp_path: Path):
    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload, indent=2) + "\n")
        return path

    return _write


@pytest.fixture()
def write_temp_toml(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content.strip() + "\n")
        return path

    return _write
