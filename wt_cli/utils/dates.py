"""Date option helpers."""

from __future__ import annotations

from datetime import date
from typing import Optional

import typer


def validate_date(value: Optional[str]) -> Optional[str]:
    """Typer callback accepting only real calendar dates written as YYYY-MM-DD."""
    if value is None:
        return value
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        parsed = None
    if parsed is None or parsed.isoformat() != value:
        raise typer.BadParameter(f"Invalid date '{value}'. Use YYYY-MM-DD, e.g. 2026-03-02")
    return value


def today_iso(today: Optional[date] = None) -> str:
    """Today's date as YYYY-MM-DD, the default for new workouts and plans."""
    return (today or date.today()).isoformat()
