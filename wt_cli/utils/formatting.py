"""Formatting helpers used by console output."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from wt_cli.core.models import Exercise, WorkoutSet


def format_rest(seconds: Optional[int]) -> str:
    """Format rest seconds as M:SS or plain seconds."""
    if not seconds:
        return "0s"
    if seconds < 60:
        return f"{seconds}s"
    m, s = divmod(int(seconds), 60)
    return f"{m}:{s:02d}"


def format_set(item: WorkoutSet) -> str:
    """Compact single-set text, mirroring the CLI set syntax."""
    if item.is_max:
        text = "max"
    elif item.hold:
        text = f"h{item.hold}s"
    else:
        text = str(item.reps)
    if item.weight is not None:
        weight = int(item.weight) if float(item.weight).is_integer() else item.weight
        text += f"@{weight}kg"
    if item.rest:
        text += f"/{format_rest(item.rest)}"
    if item.band:
        text += f"+{item.band}"
    return text


def format_exercises(exercises: Sequence[Exercise], separator: str = "; ") -> str:
    """Format exercises as 'Name 10, 8@40kg/1:30'."""
    if not exercises:
        return "-"
    return separator.join(
        f"{exercise.name} {', '.join(format_set(item) for item in exercise.sets)}".strip()
        for exercise in exercises
    )


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def sync_label(synced: bool, plain: bool = False) -> str:
    if plain:
        return "synced" if synced else "pending"
    return "[green]synced[/green]" if synced else "[yellow]pending[/yellow]"
