"""Daily macro goal commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from wt_cli.commands.common import fail, get_state, print_json_payload, settings_store
from wt_cli.core.models import FoodGoals, ValidationError
from wt_cli.core.state import CLIState
from wt_cli.core.storage import StorageError

app = typer.Typer(help="Daily macro targets")


def _print_goals(state: CLIState, goals: FoodGoals) -> None:
    data = goals.to_dict()
    if state.json_output:
        print_json_payload(state, data)
        return
    if state.plain_output:
        for key, value in data.items():
            typer.echo(f"{key}\t{value:g}")
        return

    table = Table(title="Food goals")
    table.add_column("Macro")
    table.add_column("Target")
    table.add_row("Calories", f"{goals.calories:g} kcal")
    table.add_row("Protein", f"{goals.protein:g} g")
    table.add_row("Carbs", f"{goals.carbs:g} g")
    table.add_row("Fat", f"{goals.fat:g} g")
    state.console.print(table)


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Show the saved macro targets."""
    state = get_state(ctx)
    try:
        goals = settings_store(state).get_food_goals()
    except StorageError as exc:
        fail(state, str(exc))
    _print_goals(state, goals)


@app.command("set")
def set_command(
    ctx: typer.Context,
    calories: Optional[float] = typer.Option(None, help="Calories (kcal)"),
    protein: Optional[float] = typer.Option(None, help="Protein (g)"),
    carbs: Optional[float] = typer.Option(None, help="Carbohydrates (g)"),
    fat: Optional[float] = typer.Option(None, help="Fat (g)"),
) -> None:
    """Update macro targets; unspecified values keep their current setting."""
    state = get_state(ctx)
    store = settings_store(state)
    try:
        current = store.get_food_goals().to_dict()
        updates = {"calories": calories, "protein": protein, "carbs": carbs, "fat": fat}
        current.update({key: value for key, value in updates.items() if value is not None})
        goals = FoodGoals.from_dict(current)
        store.set_food_goals(goals)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc))
    except StorageError as exc:
        fail(state, str(exc))
    _print_goals(state, goals)
