"""Training plan commands."""

from __future__ import annotations

from typing import Any, Dict, Optional

import typer
from rich.table import Table

from wt_cli.commands.common import Session, fail, get_state, open_session, print_json_payload
from wt_cli.core.api import APIError
from wt_cli.core.constants import PLAN_STATUSES
from wt_cli.core.models import ValidationError
from wt_cli.core.state import CLIState
from wt_cli.utils.dates import today_iso, validate_date

app = typer.Typer(help="Manage training plans")


def _online_session(state: CLIState) -> Session:
    session = open_session(state)
    if not session.monitor.is_online:
        fail(state, "Training plans are not available offline")
    return session


def _done(state: CLIState, payload: Dict[str, Any], message: str) -> None:
    if state.json_output:
        print_json_payload(state, payload)
    elif state.plain_output:
        for key, value in payload.items():
            typer.echo(f"{key}\t{value}")
    else:
        state.console.print(message)


@app.command("list")
def list_command(
    ctx: typer.Context,
    active: bool = typer.Option(False, "--active", help="Only the active plan"),
) -> None:
    """List training plans."""
    state = get_state(ctx)
    session = _online_session(state)
    try:
        plans = session.api.get_training_plans(active_only=active)
    except (APIError, ValidationError) as exc:
        fail(state, str(exc))

    if state.json_output:
        print_json_payload(state, {"plans": [plan.to_dict() for plan in plans]})
        return

    if state.plain_output:
        typer.echo("id\tname\tstatus\tstart\tend")
        for plan in plans:
            typer.echo(f"{plan.id}\t{plan.name}\t{plan.status}\t{plan.start_date}\t{plan.end_date or ''}")
        return

    table = Table(title=f"Training plans ({len(plans)})")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Goal")
    for plan in plans:
        table.add_row(plan.id, plan.name, plan.status, plan.start_date, plan.end_date or "-", plan.goal or "-")
    state.console.print(table)


@app.command("create")
def create_command(
    ctx: typer.Context,
    name: str = typer.Option(..., help="Plan name"),
    start_date: Optional[str] = typer.Option(None, help="Start date YYYY-MM-DD (default: today)", callback=validate_date),
    description: str = typer.Option("", help="Plan description"),
    goal: Optional[str] = typer.Option(None, help="Plan goal"),
    status: str = typer.Option("active", help="Initial status: active|paused|completed"),
) -> None:
    """Create a training plan. A new active plan completes the previous one."""
    state = get_state(ctx)
    if status not in PLAN_STATUSES:
        raise typer.BadParameter("--status must be one of: active, paused, completed")

    payload: Dict[str, Any] = {
        "name": name,
        "description": description,
        "startDate": start_date or today_iso(),
        "status": status,
    }
    if goal:
        payload["goal"] = goal

    session = _online_session(state)
    try:
        result = session.api.create_training_plan(payload)
    except APIError as exc:
        fail(state, str(exc))

    plan_id = result.get("planId")
    _done(state, {"status": "created", "planId": plan_id}, f"Created training plan {name} ({plan_id})")


def _set_status(ctx: typer.Context, plan_id: str, status: str) -> None:
    state = get_state(ctx)
    update: Dict[str, Any] = {"status": status}
    if status == "completed":
        update["endDate"] = today_iso()

    session = _online_session(state)
    try:
        session.api.update_training_plan(plan_id, update)
    except APIError as exc:
        fail(state, str(exc))
    _done(state, {"status": status, "planId": plan_id}, f"Plan {plan_id} is now {status}")


@app.command("activate")
def activate_command(ctx: typer.Context, plan_id: str = typer.Argument(..., help="Plan ID")) -> None:
    """Make a plan active (the server completes the previous active plan)."""
    _set_status(ctx, plan_id, "active")


@app.command("pause")
def pause_command(ctx: typer.Context, plan_id: str = typer.Argument(..., help="Plan ID")) -> None:
    """Pause a plan."""
    _set_status(ctx, plan_id, "paused")


@app.command("complete")
def complete_command(ctx: typer.Context, plan_id: str = typer.Argument(..., help="Plan ID")) -> None:
    """Mark a plan completed with today's end date."""
    _set_status(ctx, plan_id, "completed")


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    plan_id: str = typer.Argument(..., help="Plan ID"),
    force: bool = typer.Option(False, "--force", help="Skip confirmation prompt"),
) -> None:
    """Delete a training plan."""
    state = get_state(ctx)
    if not force and not typer.confirm(f"Delete training plan {plan_id}?", default=False):
        raise typer.Exit(code=0)

    session = _online_session(state)
    try:
        session.api.delete_training_plan(plan_id)
    except APIError as exc:
        fail(state, str(exc))
    _done(state, {"status": "deleted", "planId": plan_id}, f"Deleted training plan {plan_id}")
