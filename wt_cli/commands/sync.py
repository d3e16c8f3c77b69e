"""Sync, status and watch commands."""

from __future__ import annotations

from typing import Optional

import typer

from wt_cli.commands.common import fail, get_state, open_session, print_json_payload, print_notifications
from wt_cli.core.config import resolve_base_url, resolve_storage_path
from wt_cli.core.storage import StorageError
from wt_cli.core.sync import SyncReport


def sync_command(ctx: typer.Context) -> None:
    """Send workouts saved offline to the server."""
    state = get_state(ctx)
    session = open_session(state)
    client = session.client

    try:
        pending = len(session.engine.pending())
        report = client.manual_sync()
    except StorageError as exc:
        fail(state, str(exc))

    online = client.is_online
    failed = (not online) or bool(report and report.failed)

    if state.json_output:
        status = "offline" if not online else "nothing-to-sync" if pending == 0 else "error" if failed else "synced"
        print_json_payload(
            state,
            {
                "status": status,
                "online": online,
                "pending_before": pending,
                "report": report.to_dict() if report else None,
            },
        )
    elif pending == 0 and online:
        if state.plain_output:
            typer.echo("status\tnothing-to-sync")
        else:
            state.console.print("Nothing to sync")
    else:
        print_notifications(state, client.notifications)
        if report and not state.plain_output:
            state.console.print(f"Synced: {len(report.synced)}, remaining: {report.remaining}")
        elif report:
            typer.echo(f"synced\t{len(report.synced)}")
            typer.echo(f"remaining\t{report.remaining}")

    if failed:
        raise typer.Exit(code=1)


def status_command(ctx: typer.Context) -> None:
    """Show connectivity and the number of pending workouts."""
    state = get_state(ctx)
    session = open_session(state)
    try:
        pending = len(session.engine.pending())
    except StorageError as exc:
        fail(state, str(exc))

    payload = {
        "online": session.monitor.is_online,
        "pending": pending,
        "base_url": resolve_base_url(state.config),
        "storage": str(resolve_storage_path(state.config)),
    }
    if state.json_output:
        print_json_payload(state, payload)
        return
    if state.plain_output:
        for key, value in payload.items():
            typer.echo(f"{key}\t{str(value).lower() if isinstance(value, bool) else value}")
        return

    label = "[green]online[/green]" if payload["online"] else "[yellow]offline[/yellow]"
    state.console.print(f"Connection: {label}")
    state.console.print(f"Pending workouts: {pending}")
    state.console.print(f"Server: {payload['base_url']}", markup=False)


def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(None, help="Seconds between checks (default from config)"),
    iterations: Optional[int] = typer.Option(None, help="Stop after N checks (default: run until interrupted)"),
) -> None:
    """Keep checking connectivity and sync pending workouts when online."""
    state = get_state(ctx)
    session = open_session(state, probe=False)
    every = interval if interval is not None else float(state.config.get("sync", {}).get("interval_seconds", 30))

    def on_tick(online: bool, report: Optional[SyncReport]) -> None:
        if state.json_output:
            print_json_payload(state, {"online": online, "report": report.to_dict() if report else None})
        elif state.plain_output:
            typer.echo(f"online\t{str(online).lower()}")
            if report:
                typer.echo(f"synced\t{len(report.synced)}\tremaining\t{report.remaining}")
        elif report:
            state.console.print(f"Synced {len(report.synced)} workout(s), {report.remaining} remaining")

    def on_reconnect_synced() -> None:
        if not state.json_output and not state.plain_output:
            state.console.print("Sync complete")

    session.engine.on_sync_complete(on_reconnect_synced)
    try:
        session.engine.watch(interval=every, iterations=iterations, on_tick=on_tick)
    except KeyboardInterrupt:
        raise typer.Exit(code=0)
    except StorageError as exc:
        fail(state, str(exc))
