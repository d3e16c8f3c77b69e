"""Entry point for wt."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from wt_cli import __version__
from wt_cli.commands import config as config_commands
from wt_cli.commands import goals as goals_commands
from wt_cli.commands import plans as plans_commands
from wt_cli.commands import workouts as workout_commands
from wt_cli.commands.sync import status_command, sync_command, watch_command
from wt_cli.core.config import ConfigError, default_config_path, load_config
from wt_cli.core.state import CLIState
from wt_cli.utils.logs import configure_logging

app = typer.Typer(
    add_completion=False,
    help="Workout tracker command-line interface with offline sync",
    invoke_without_command=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    offline: bool = typer.Option(False, "--offline", help="Work offline without contacting the server"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    configure_logging(verbose=verbose, quiet=quiet, no_color=plain_output)
    ctx.obj = CLIState(
        json_output=(json_output and not plain_output),
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        offline=offline,
        config_path=cfg_path,
        config=cfg,
        console=console,
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


# Top-level commands
app.command("sync")(sync_command)
app.command("status")(status_command)
app.command("watch")(watch_command)
app.add_typer(workout_commands.app, name="workouts")
app.add_typer(plans_commands.app, name="plans")
app.add_typer(goals_commands.app, name="food-goals")
app.add_typer(config_commands.app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
