"""Workout list view-model: merged display state and mutation routing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from wt_cli.core import constants as msg
from wt_cli.core.api import APIError
from wt_cli.core.models import TrainingPlan, ValidationError, Workout, WorkoutPayload
from wt_cli.core.reconcile import absorb_pending, merge_workouts
from wt_cli.core.sync import OfflineError, SyncEngine, SyncError, SyncReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """User-facing status message."""

    message: str
    severity: str = "success"

    def __post_init__(self) -> None:
        if self.severity not in msg.SEVERITIES:
            raise ValueError(f"Unknown severity '{self.severity}'. Use one of: {', '.join(msg.SEVERITIES)}")


class WorkoutClient:
    """Keeps one coherent workout list over server data and the offline queue.

    A workout is either *unsynced* (only in the local queue) or *synced*
    (confirmed by the server). Unsynced workouts are edited and deleted
    locally with no network call; synced ones need connectivity.
    """

    def __init__(self, engine: SyncEngine, workouts: Optional[List[Workout]] = None) -> None:
        self.engine = engine
        self.api = engine.api
        self.workouts: List[Workout] = list(workouts or [])
        self.plans: List[TrainingPlan] = []
        self.notifications: List[Notification] = []
        self._unregister = engine.on_sync_complete(self.refresh_workouts)

    @property
    def is_online(self) -> bool:
        return self.engine.is_online

    @property
    def active_plan(self) -> Optional[TrainingPlan]:
        return next((plan for plan in self.plans if plan.status == "active"), None)

    def close(self) -> None:
        self._unregister()

    def notify(self, message: str, severity: str = "success") -> None:
        logger.info("%s: %s", severity, message)
        self.notifications.append(Notification(message=message, severity=severity))

    def find(self, workout_id: str) -> Optional[Workout]:
        return next((w for w in self.workouts if w.id == workout_id), None)

    def load(self) -> List[Workout]:
        """Initial population of workouts and plans."""
        if self.is_online:
            try:
                self.fetch_training_plans()
            except (APIError, ValidationError) as exc:
                logger.error("Error fetching training plans: %s", exc)
            self.refresh_workouts()
        self.workouts = absorb_pending(self.workouts, self.engine.pending())
        return self.workouts

    def fetch_training_plans(self) -> List[TrainingPlan]:
        self.plans = self.api.get_training_plans()
        return self.plans

    def refresh_workouts(self) -> None:
        """Re-fetch authoritative data and merge the pending queue on top."""
        if not self.is_online:
            return
        try:
            server = self.api.get_workouts()
        except (APIError, ValidationError) as exc:
            logger.error("Error refreshing workouts: %s", exc)
            return
        self.workouts = merge_workouts(server, self.engine.pending())

    def save_workout(self, form: Dict[str, Any], editing: Optional[Workout] = None) -> bool:
        """Create a workout, or edit ``editing``; returns True on success."""
        payload = WorkoutPayload.from_dict(form)
        if editing is None:
            return self._create(payload)
        if not editing.synced:
            return self._edit_offline(editing, payload)
        if self.is_online:
            return self._edit_online(editing, payload)

        self.notify(msg.MSG_EDIT_OFFLINE, "warning")
        return False

    def _create(self, payload: WorkoutPayload) -> bool:
        result = self.engine.submit_workout(payload.to_dict())
        if result.get("offline"):
            self.workouts = absorb_pending(self.workouts, self.engine.pending())
            self.notify(msg.MSG_SAVED_OFFLINE, "warning")
        else:
            self.refresh_workouts()
            self.notify(msg.MSG_ADDED)
        return True

    def _edit_offline(self, editing: Workout, payload: WorkoutPayload) -> bool:
        if not editing.id:
            self.notify(msg.MSG_MISSING_ID, "error")
            return False
        if not self.engine.update_offline_workout(editing.id, payload.to_dict()):
            self.notify(msg.MSG_OFFLINE_UPDATE_FAILED, "error")
            return False
        self.workouts = [w.apply(payload) if w.id == editing.id else w for w in self.workouts]
        self.notify(msg.MSG_OFFLINE_UPDATED)
        return True

    def _edit_online(self, editing: Workout, payload: WorkoutPayload) -> bool:
        try:
            self.api.update_workout(editing.id, {**payload.to_dict(), "synced": True})
        except APIError as exc:
            self.notify(str(exc) or "Error saving workout", "error")
            raise
        self.refresh_workouts()
        self.notify(msg.MSG_UPDATED)
        return True

    def delete_workout(self, workout_id: str) -> None:
        """Delete a workout; raises OfflineError for synced workouts while offline."""
        workout = self.find(workout_id)

        if workout is not None and not workout.synced:
            self.engine.store.remove(workout_id)
            self.workouts = [w for w in self.workouts if w.id != workout_id]
            self.notify(msg.MSG_OFFLINE_DELETED)
            return

        if not self.is_online:
            self.notify(msg.MSG_DELETE_OFFLINE, "warning")
            raise OfflineError("Offline mode - delete not available")

        try:
            self.api.delete_workout(workout_id)
        except APIError as exc:
            self.notify(str(exc) or "Error deleting workout", "error")
            raise

        self.workouts = [w for w in self.workouts if w.id != workout_id]
        self.notify(msg.MSG_DELETED)

    def manual_sync(self) -> Optional[SyncReport]:
        if not self.is_online:
            self.notify(msg.MSG_NO_CONNECTION, "warning")
            return None
        if not self.engine.pending():
            return None
        try:
            report = self.engine.manual_sync()
        except (OfflineError, SyncError) as exc:
            logger.error("Error during sync: %s", exc)
            self.notify(msg.MSG_SYNC_FAILED, "error")
            return getattr(exc, "report", None)
        self.notify(msg.MSG_SYNC_OK)
        return report

    def history_plan_id(self) -> Optional[str]:
        """Default plan for history view: first completed plan, else the first plan."""
        completed = next((plan for plan in self.plans if plan.status == "completed"), None)
        plan = completed or (self.plans[0] if self.plans else None)
        return plan.id if plan else None

    def filter_workouts(self, view: str = "current", plan_id: Optional[str] = None) -> List[Workout]:
        if view == "current":
            active = self.active_plan
            if active is None:
                return []
            # Unsynced workouts without a plan are assigned to the active plan on sync.
            return [w for w in self.workouts if w.plan_id == active.id or (not w.synced and not w.plan_id)]
        if view == "history":
            selected = plan_id or self.history_plan_id()
            return [w for w in self.workouts if w.plan_id == selected] if selected else []
        if view == "all":
            return list(self.workouts)
        raise ValueError(f"Unknown view: {view}")
