"""Workout list/add/edit/delete commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.table import Table

from wt_cli.commands.common import (
    Session,
    fail,
    get_state,
    open_session,
    print_json_payload,
    print_notifications,
)
from wt_cli.core.api import APIError
from wt_cli.core.constants import MSG_EDIT_OFFLINE, VIEW_MODES
from wt_cli.core.models import ValidationError, Workout
from wt_cli.core.state import CLIState
from wt_cli.core.storage import StorageError
from wt_cli.core.sync import OfflineError
from wt_cli.core.workouts import Notification
from wt_cli.utils.dates import today_iso, validate_date
from wt_cli.utils.formatting import format_exercises, format_timestamp, sync_label
from wt_cli.utils.parsing import build_workout_form, load_workout_input, parse_exercise

app = typer.Typer(help="Log and manage workouts")


def _load_session(state: CLIState) -> Session:
    session = open_session(state)
    try:
        session.client.load()
    except StorageError as exc:
        fail(state, str(exc))
    return session


def _print_workouts(state: CLIState, workouts: List[Workout], title: str, online: bool) -> None:
    if state.json_output:
        print_json_payload(
            state,
            {
                "online": online,
                "total": len(workouts),
                "pending": sum(1 for w in workouts if not w.synced),
                "workouts": [w.to_dict() for w in workouts],
            },
        )
        return

    if state.plain_output:
        typer.echo("id\tdate\ttype\tstatus\texercises")
        for workout in workouts:
            typer.echo(
                "\t".join(
                    [
                        workout.id,
                        workout.date,
                        workout.type,
                        sync_label(workout.synced, plain=True),
                        format_exercises(workout.exercises),
                    ]
                )
            )
        typer.echo(f"total\t{len(workouts)}")
        return

    table = Table(title=f"{title} ({len(workouts)} total)")
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Exercises")
    for workout in workouts:
        table.add_row(
            workout.id,
            workout.date,
            workout.type,
            sync_label(workout.synced),
            format_exercises(workout.exercises, separator="\n"),
        )
    state.console.print(table)
    if not online:
        state.console.print("Offline - showing locally saved workouts only", style="yellow")


@app.command("list")
def list_command(
    ctx: typer.Context,
    view: Optional[str] = typer.Option(None, help="View: current|history|all"),
    plan_id: Optional[str] = typer.Option(None, "--plan", help="Plan ID for history view"),
) -> None:
    """List workouts, pending offline entries first."""
    state = get_state(ctx)
    view = view or str(state.config.get("defaults", {}).get("view", "all"))
    if view not in VIEW_MODES:
        raise typer.BadParameter("--view must be one of: current, history, all")

    session = _load_session(state)
    workouts = session.client.filter_workouts(view, plan_id=plan_id)
    _print_workouts(state, workouts, title=f"Workouts: {view}", online=session.client.is_online)


@app.command("pending")
def pending_command(ctx: typer.Context) -> None:
    """Show workouts waiting to be synced."""
    state = get_state(ctx)
    session = open_session(state, probe=False)
    try:
        entries = session.engine.pending()
    except StorageError as exc:
        fail(state, str(exc))

    if state.json_output:
        print_json_payload(state, {"pending": [entry.to_dict() for entry in entries]})
        return

    if state.plain_output:
        typer.echo("id\tdate\ttype\ttimestamp")
        for entry in entries:
            typer.echo(f"{entry.id}\t{entry.data.get('date', '')}\t{entry.data.get('type', '')}\t{entry.timestamp}")
        typer.echo(f"total\t{len(entries)}")
        return

    if not entries:
        state.console.print("No workouts waiting for sync")
        return
    table = Table(title=f"Pending workouts ({len(entries)})")
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Type")
    for entry in entries:
        table.add_row(entry.id, str(entry.data.get("date", "")), str(entry.data.get("type", "")))
    state.console.print(table)


@app.command("show")
def show_command(
    ctx: typer.Context,
    workout_id: str = typer.Argument(..., help="Workout ID"),
) -> None:
    """Show a single workout."""
    state = get_state(ctx)
    session = _load_session(state)
    workout = session.client.find(workout_id)
    if workout is None:
        fail(state, f"Workout {workout_id} not found")

    if state.json_output:
        print_json_payload(state, workout.to_dict())
        return

    rows = [
        ("id", workout.id),
        ("date", workout.date),
        ("type", workout.type),
        ("status", sync_label(workout.synced, plain=True)),
        ("notes", workout.notes or "-"),
        ("plan", workout.plan_id or "-"),
        ("created", format_timestamp(workout.created_at)),
        ("exercises", format_exercises(workout.exercises)),
    ]
    if state.plain_output:
        for key, value in rows:
            typer.echo(f"{key}\t{value}")
        return

    table = Table(title=f"Workout {workout.id}")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(key, value)
    state.console.print(table)


def _read_forms(
    file: Optional[Path],
    stdin: bool,
    date: Optional[str],
    workout_type: Optional[str],
    exercises: Optional[List[str]],
    notes: str,
    plan_id: Optional[str],
) -> List[Dict[str, Any]]:
    stdin_text = sys.stdin.read() if stdin else ""
    forms = load_workout_input(file_path=file, read_stdin=stdin, stdin_text=stdin_text)
    if not forms and workout_type and exercises:
        forms = [
            build_workout_form(
                date=date or today_iso(),
                workout_type=workout_type,
                exercises=exercises,
                notes=notes,
                plan_id=plan_id,
            )
        ]
    return forms


@app.command("add")
def add_command(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(None, help="JSON/YAML file with workout(s)"),
    stdin: bool = typer.Option(False, "--stdin", help="Read workout data from stdin"),
    date: Optional[str] = typer.Option(None, help="Workout date YYYY-MM-DD (default: today)", callback=validate_date),
    workout_type: Optional[str] = typer.Option(None, "--type", help="Workout type, e.g. push, pull, legs"),
    exercise: Optional[List[str]] = typer.Option(None, "--exercise", "-e", help="NAME:SET,SET (e.g. 'Push-ups:10/60,8/60')"),
    notes: str = typer.Option("", help="Workout notes"),
    plan_id: Optional[str] = typer.Option(None, "--plan", help="Training plan ID"),
) -> None:
    """Log a workout; saved offline when the server is unreachable."""
    state = get_state(ctx)
    try:
        forms = _read_forms(file, stdin, date, workout_type, exercise, notes, plan_id)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc))
    if not forms:
        raise typer.BadParameter("Provide --file, --stdin, or --type with at least one --exercise")

    session = open_session(state)
    client = session.client
    results: List[Dict[str, Any]] = []
    failed = False
    for form in forms:
        try:
            client.save_workout(form)
            results.append({"status": "saved", "date": form.get("date"), "type": form.get("type")})
        except ValidationError as exc:
            failed = True
            results.append({"status": "invalid", "date": form.get("date"), "type": form.get("type"), "error": str(exc)})
        except StorageError as exc:
            fail(state, str(exc))

    pending_ids = [w.id for w in client.workouts if not w.synced]
    if state.json_output:
        print_json_payload(
            state,
            {
                "online": client.is_online,
                "results": results,
                "pending": pending_ids,
                "notifications": [n.message for n in client.notifications],
            },
        )
    else:
        print_notifications(state, client.notifications)
        for item in results:
            if item["status"] == "invalid":
                message = f"Invalid workout ({item.get('date')}): {item['error']}"
                print_notifications(state, [Notification(message=message, severity="error")])
    if failed:
        raise typer.Exit(code=1)


@app.command("edit")
def edit_command(
    ctx: typer.Context,
    workout_id: str = typer.Argument(..., help="Workout ID"),
    file: Optional[Path] = typer.Option(None, help="JSON/YAML file with the new workout data"),
    stdin: bool = typer.Option(False, "--stdin", help="Read workout data from stdin"),
    date: Optional[str] = typer.Option(None, help="New date YYYY-MM-DD", callback=validate_date),
    workout_type: Optional[str] = typer.Option(None, "--type", help="New workout type"),
    exercise: Optional[List[str]] = typer.Option(None, "--exercise", "-e", help="Replace exercises (NAME:SET,SET)"),
    notes: Optional[str] = typer.Option(None, help="New notes"),
) -> None:
    """Edit a workout. Synced workouts can only be edited online."""
    state = get_state(ctx)
    session = _load_session(state)
    client = session.client

    workout = client.find(workout_id)
    if workout is None:
        if not client.is_online:
            client.notify(MSG_EDIT_OFFLINE, "warning")
            print_notifications(state, client.notifications)
            fail(state, f"Workout {workout_id} is not available offline", online=False)
        fail(state, f"Workout {workout_id} not found")

    stdin_text = sys.stdin.read() if stdin else ""
    try:
        forms = load_workout_input(file_path=file, read_stdin=stdin, stdin_text=stdin_text)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc))
    if forms:
        form = forms[0]
    else:
        try:
            new_exercises = [parse_exercise(item) for item in exercise] if exercise else None
        except ValidationError as exc:
            raise typer.BadParameter(str(exc))
        form = {
            "date": date or workout.date,
            "type": workout_type or workout.type,
            "notes": workout.notes if notes is None else notes,
            "exercises": new_exercises or [item.to_dict() for item in workout.exercises],
        }
        if workout.plan_id:
            form["planId"] = workout.plan_id

    try:
        saved = client.save_workout(form, editing=workout)
    except ValidationError as exc:
        fail(state, f"Invalid workout: {exc}")
    except APIError as exc:
        print_notifications(state, client.notifications)
        fail(state, str(exc))

    if state.json_output:
        print_json_payload(
            state,
            {
                "status": "updated" if saved else "rejected",
                "workoutId": workout_id,
                "synced": workout.synced,
                "notifications": [n.message for n in client.notifications],
            },
        )
    else:
        print_notifications(state, client.notifications)
    if not saved:
        raise typer.Exit(code=1)


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    workout_id: str = typer.Argument(..., help="Workout ID"),
    force: bool = typer.Option(False, "--force", help="Skip confirmation prompt"),
) -> None:
    """Delete a workout. Pending workouts are removed locally without a request."""
    state = get_state(ctx)

    if not force:
        confirmed = typer.confirm(f"Delete workout {workout_id}?", default=False)
        if not confirmed:
            raise typer.Exit(code=0)

    session = _load_session(state)
    client = session.client
    try:
        client.delete_workout(workout_id)
    except (OfflineError, APIError) as exc:
        if state.json_output:
            print_json_payload(state, {"status": "error", "workoutId": workout_id, "message": str(exc)})
        else:
            print_notifications(state, client.notifications)
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, {"status": "deleted", "workoutId": workout_id})
        return
    print_notifications(state, client.notifications)
