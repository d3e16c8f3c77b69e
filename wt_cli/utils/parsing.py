"""Parsing helpers for workout input from flags, files and stdin."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from wt_cli.core.models import ValidationError

_SET_RE = re.compile(
    r"^(?:(?P<max>max)|h(?P<hold>\d+)|(?P<reps>\d+))"
    r"(?:@(?P<weight>\d+(?:\.\d+)?)(?:kg)?)?"
    r"(?:/(?P<rest>[\d:]+))?"
    r"(?:\+(?P<band>[a-z]+))?$"
)


def parse_rest(value: str) -> int:
    """Parse rest like '90' or '1:30' into seconds."""
    parts = value.strip().split(":")
    try:
        if len(parts) == 1:
            return int(parts[0])
        if len(parts) == 2:
            return int(parts[0]) * 60 + int(parts[1])
    except ValueError as exc:
        raise ValidationError(f"Invalid rest: {value}") from exc
    raise ValidationError(f"Invalid rest: {value}")


def parse_set(spec: str) -> Dict[str, Any]:
    """Parse one set: REPS[@WEIGHT][/REST][+BAND], max[/REST] or hSECONDS[/REST]."""
    match = _SET_RE.match(spec.strip().lower())
    if not match:
        raise ValidationError(
            f"Invalid set '{spec}'. Expected e.g. 10, 8@40/90, max/60, h30/60, 12/60+red"
        )

    result: Dict[str, Any] = {"reps": 0, "rest": 0}
    if match.group("max"):
        result["isMax"] = True
    elif match.group("hold"):
        result["hold"] = int(match.group("hold"))
    else:
        result["reps"] = int(match.group("reps"))

    if match.group("weight"):
        result["weight"] = float(match.group("weight"))
    if match.group("rest"):
        result["rest"] = parse_rest(match.group("rest"))
    if match.group("band"):
        result["band"] = match.group("band")
    return result


def parse_exercise(spec: str) -> Dict[str, Any]:
    """Parse 'NAME:SET,SET,...' into an exercise object."""
    name, sep, sets_text = spec.partition(":")
    if not sep or not name.strip():
        raise ValidationError(f"Invalid exercise '{spec}'. Expected NAME:SET,SET,...")
    sets = [parse_set(item) for item in sets_text.split(",") if item.strip()]
    if not sets:
        raise ValidationError(f"Exercise '{name.strip()}' needs at least one set")
    return {"name": name.strip(), "sets": sets}


def load_workout_input(file_path: Optional[Path], read_stdin: bool, stdin_text: str = "") -> List[Dict[str, Any]]:
    """Load workout object(s) from file or stdin text.

    Unreadable files and unparseable JSON/YAML raise :class:`ValidationError`.
    """
    raw_data: Any
    if file_path:
        try:
            text = file_path.read_text()
            if file_path.suffix.lower() in {".yaml", ".yml"}:
                raw_data = yaml.safe_load(text)
            else:
                raw_data = json.loads(text)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ValidationError(f"Cannot read workout file {file_path}: {exc}") from exc
    elif read_stdin:
        text = stdin_text.strip()
        if not text:
            return []
        try:
            raw_data = json.loads(text)
        except json.JSONDecodeError:
            try:
                raw_data = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ValidationError(f"Cannot parse workout data from stdin: {exc}") from exc
    else:
        return []

    if isinstance(raw_data, dict):
        return [raw_data]
    if isinstance(raw_data, list):
        return [item for item in raw_data if isinstance(item, dict)]
    return []


def build_workout_form(
    date: str,
    workout_type: str,
    exercises: Sequence[str],
    notes: str = "",
    plan_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Build workout form data from CLI flags."""
    form: Dict[str, Any] = {
        "date": date,
        "type": workout_type,
        "notes": notes,
        "exercises": [parse_exercise(item) for item in exercises],
    }
    if plan_id:
        form["planId"] = plan_id
    return form
