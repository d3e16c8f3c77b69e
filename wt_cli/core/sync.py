"""Draining of offline workouts against the API.

Policy: entries are sent sequentially in queue order, one POST each per
drain (the API client itself retries transient failures with exponential
backoff). Successful entries leave the queue; failed ones stay for the next
drain, so delivery is at-least-once.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from wt_cli.core.api import APIError, WorkoutTrackerAPI
from wt_cli.core.connectivity import ConnectivityMonitor
from wt_cli.core.models import PendingWorkout
from wt_cli.core.storage import PendingWorkoutStore

logger = logging.getLogger(__name__)


class OfflineError(RuntimeError):
    """Raised when an action needs connectivity and none is available."""


class SyncError(RuntimeError):
    """Raised by a manual sync when some entries could not be delivered."""

    def __init__(self, message: str, report: "SyncReport") -> None:
        super().__init__(message)
        self.report = report


@dataclass
class SyncReport:
    """Outcome of one drain."""

    synced: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    remaining: int = 0
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synced": list(self.synced),
            "failed": dict(self.failed),
            "remaining": self.remaining,
            "skipped": self.skipped,
        }


class SyncEngine:
    """Routes new workouts online or into the queue and drains the queue."""

    def __init__(
        self,
        api: WorkoutTrackerAPI,
        store: PendingWorkoutStore,
        monitor: ConnectivityMonitor,
        stabilize_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api = api
        self.store = store
        self.monitor = monitor
        self.stabilize_delay = stabilize_delay
        self._sleep = sleep
        self._callbacks: List[Callable[[], None]] = []
        self._unregister_monitor = monitor.on_online(self._handle_reconnect)

    @property
    def is_online(self) -> bool:
        return self.monitor.is_online

    def pending(self) -> List[PendingWorkout]:
        return self.store.list()

    def on_sync_complete(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe to drain completion; returns a function that unsubscribes."""
        self._callbacks.append(callback)

        def unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unregister

    def close(self) -> None:
        self._unregister_monitor()

    def _handle_reconnect(self) -> None:
        if self.stabilize_delay > 0:
            self._sleep(self.stabilize_delay)
        logger.info("Connection restored - starting sync")
        self.sync_pending()

    def submit_workout(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Send a new workout, or queue it when offline or when sending fails."""
        if self.is_online:
            try:
                result = self.api.create_workout({**payload, "synced": True})
                logger.debug("Workout sent online: %s", result.get("workoutId"))
                return result
            except APIError as exc:
                logger.warning("Online submit failed, saving offline: %s", exc)

        entry = self.store.enqueue(payload)
        return {"id": entry.id, "offline": True}

    def update_offline_workout(self, workout_id: str, payload: Dict[str, Any]) -> bool:
        return self.store.update(workout_id, payload)

    def sync_pending(self) -> SyncReport:
        entries = self.store.list()
        if not self.is_online or not entries:
            logger.debug("Sync skipped - offline or nothing pending")
            return SyncReport(remaining=len(entries), skipped=True)

        logger.info("Syncing %d pending workout(s)", len(entries))
        report = SyncReport()
        for entry in entries:
            try:
                self.api.create_workout({**entry.data, "synced": True})
            except APIError as exc:
                logger.error("Sync failed for %s: %s", entry.id, exc)
                report.failed[entry.id] = str(exc)
                continue
            logger.debug("Workout synced: %s", entry.id)
            report.synced.append(entry.id)

        # Re-read so entries queued during the drain are kept.
        done = set(report.synced)
        remaining = [entry for entry in self.store.list() if entry.id not in done]
        self.store.replace(remaining)
        report.remaining = len(remaining)
        logger.info("Sync finished. Synced: %d, remaining: %d", len(report.synced), report.remaining)

        for callback in list(self._callbacks):
            callback()
        return report

    def manual_sync(self) -> SyncReport:
        """User-triggered drain; fails loudly instead of dropping entries."""
        if not self.is_online:
            raise OfflineError("No internet connection")
        report = self.sync_pending()
        if report.failed:
            raise SyncError(
                f"{len(report.failed)} workout(s) failed to sync; they remain queued",
                report,
            )
        return report

    def watch(
        self,
        interval: float = 30.0,
        iterations: Optional[int] = None,
        on_tick: Optional[Callable[[bool, Optional[SyncReport]], None]] = None,
    ) -> None:
        """Poll connectivity and drain periodically while entries are pending."""
        count = 0
        while iterations is None or count < iterations:
            was_checked = self.monitor.is_client
            was_online = self.monitor.is_online
            online = self.monitor.check()
            report: Optional[SyncReport] = None
            reconnected = was_checked and not was_online and online
            # A reconnect already triggered a drain through the monitor callback.
            if online and not reconnected and len(self.store) > 0:
                logger.debug("Periodic sync check")
                report = self.sync_pending()
            if on_tick is not None:
                on_tick(online, report)
            count += 1
            if iterations is None or count < iterations:
                self._sleep(interval)
