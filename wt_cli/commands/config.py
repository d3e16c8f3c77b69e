"""Config inspection and editing commands."""

from __future__ import annotations

from typing import Any, Dict, Tuple

import typer

from wt_cli.commands.common import fail, get_state, print_json_payload
from wt_cli.core.config import DEFAULT_CONFIG, ConfigError, _layer, read_config_file, save_config, validate_config

app = typer.Typer(help="Show or change configuration")


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


def _split_key(key: str) -> Tuple[str, str]:
    section, sep, name = key.partition(".")
    if not sep or name not in DEFAULT_CONFIG.get(section, {}):
        known = ", ".join(sorted(_flatten(DEFAULT_CONFIG)))
        raise typer.BadParameter(f"Unknown config key '{key}'. Known keys: {known}")
    return section, name


def coerce_value(key: str, raw: str) -> Any:
    """Convert a CLI string to the type of the key's default value."""
    section, name = _split_key(key)
    default = DEFAULT_CONFIG[section][name]
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
        raise typer.BadParameter(f"{key} expects true or false")
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            raise typer.BadParameter(f"{key} expects an integer")
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError:
            raise typer.BadParameter(f"{key} expects a number")
    return raw


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Print the effective configuration (file merged over defaults)."""
    state = get_state(ctx)
    if state.json_output:
        print_json_payload(state, {"path": str(state.config_path), "config": state.config})
        return
    flat = _flatten(state.config)
    if state.plain_output:
        for key, value in flat.items():
            typer.echo(f"{key}\t{value}")
        return
    state.console.print(f"Config file: {state.config_path}", markup=False)
    for key, value in flat.items():
        state.console.print(f"{key} = {value!r}", markup=False)


@app.command("set")
def set_command(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Dotted key, e.g. api.base_url or sync.force_offline"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set one config value and write the config file.

    Only keys already in the file plus the changed key are written, so defaults
    derived from the environment stay live.
    """
    state = get_state(ctx)
    section, name = _split_key(key)
    coerced = coerce_value(key, value)

    try:
        stored = read_config_file(state.config_path)
    except ConfigError as exc:
        fail(state, str(exc), code=2)
    stored = _layer(stored, {section: {name: coerced}})
    try:
        state.config = validate_config(_layer(DEFAULT_CONFIG, stored))
    except ConfigError as exc:
        raise typer.BadParameter(str(exc))
    try:
        path = save_config(stored, state.config_path)
    except OSError as exc:
        fail(state, f"Cannot write config file {state.config_path}: {exc}")

    if state.json_output:
        print_json_payload(state, {"key": key, "value": coerced, "path": str(path)})
    elif state.plain_output:
        typer.echo(f"{key}\t{coerced}")
    else:
        state.console.print(f"Saved {key} = {coerced!r} to {path}", markup=False)
