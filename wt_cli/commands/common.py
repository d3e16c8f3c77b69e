"""Shared command helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, NoReturn

import typer

from wt_cli.core.api import WorkoutTrackerAPI
from wt_cli.core.config import resolve_base_url, resolve_storage_path, resolve_token
from wt_cli.core.connectivity import ConnectivityMonitor
from wt_cli.core.state import CLIState
from wt_cli.core.storage import LocalStore, PendingWorkoutStore, SettingsStore
from wt_cli.core.sync import SyncEngine
from wt_cli.core.workouts import Notification, WorkoutClient

_SEVERITY_STYLE = {"success": "green", "warning": "yellow", "error": "red"}


@dataclass
class Session:
    """Wired-up collaborators for one command invocation."""

    api: WorkoutTrackerAPI
    monitor: ConnectivityMonitor
    engine: SyncEngine
    client: WorkoutClient


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def build_api(state: CLIState) -> WorkoutTrackerAPI:
    api_cfg = state.config.get("api", {})
    return WorkoutTrackerAPI(
        base_url=resolve_base_url(state.config),
        token=resolve_token(state.config),
        rate_limit_delay=float(api_cfg.get("rate_limit_delay", 0.0)),
        max_retries=int(api_cfg.get("max_retries", 3)),
        timeout_seconds=int(api_cfg.get("timeout_seconds", 30)),
    )


def local_store(state: CLIState) -> LocalStore:
    return LocalStore(resolve_storage_path(state.config))


def settings_store(state: CLIState) -> SettingsStore:
    return SettingsStore(local_store(state))


def open_session(state: CLIState, probe: bool = True) -> Session:
    """Build API client, monitor, sync engine and view-model from config."""
    sync_cfg = state.config.get("sync", {})
    api = build_api(state)
    probe_path = str(sync_cfg.get("probe_path", "/api/workouts"))
    probe_timeout = float(sync_cfg.get("probe_timeout", 5))
    monitor = ConnectivityMonitor(
        probe=lambda: api.probe(probe_path, timeout=probe_timeout),
        force_offline=state.offline or bool(sync_cfg.get("force_offline", False)),
    )
    if probe:
        monitor.check()
    engine = SyncEngine(
        api=api,
        store=PendingWorkoutStore(local_store(state)),
        monitor=monitor,
        stabilize_delay=float(sync_cfg.get("stabilize_delay", 1.0)),
    )
    return Session(api=api, monitor=monitor, engine=engine, client=WorkoutClient(engine))


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)


def print_notifications(state: CLIState, notifications: Iterable[Notification]) -> None:
    """Show view-model notifications outside JSON mode."""
    if state.json_output:
        return
    for item in notifications:
        if state.plain_output:
            typer.echo(f"{item.severity}\t{item.message}")
        else:
            style = _SEVERITY_STYLE.get(item.severity, "white")
            state.console.print(item.message, style=style, markup=False)


def fail(state: CLIState, message: str, code: int = 1, **extra: Any) -> NoReturn:
    """Report an error in the active output mode and exit."""
    if state.json_output:
        print_json_payload(state, {"status": "error", "message": message, **extra})
    elif state.plain_output:
        typer.echo("status\terror")
        typer.echo(f"message\t{message}")
    else:
        state.console.print(message, style="red", markup=False)
    raise typer.Exit(code=code)
