"""Configuration loading, validation and persistence.

The config is a two-level table (``[section] key = value``). Values found in
the file are layered over :data:`DEFAULT_CONFIG`; environment variables win
over both for the handful of settings that have one.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.9-3.10
    import tomli as tomllib  # type: ignore[no-redef]

from wt_cli.core.constants import DEFAULT_BASE_URL, VIEW_MODES

Config = Dict[str, Dict[str, Any]]


class ConfigError(RuntimeError):
    """Raised when the config file cannot be parsed or holds invalid values."""


def expand_path(path_str: str) -> Path:
    """Expand ``~`` and ``$VARS`` and return an absolute path."""
    return Path(os.path.expandvars(path_str)).expanduser().resolve()


def default_data_dir() -> Path:
    return expand_path(os.getenv("WT_DATA_DIR", "~/.local/share/wt"))


def default_config_path() -> Path:
    return expand_path(os.getenv("WT_CONFIG_FILE", "~/.config/wt/config.toml"))


def _default_config() -> Config:
    return {
        "api": {
            "base_url": DEFAULT_BASE_URL,
            "token": "",
            "rate_limit_delay": 0.0,
            "max_retries": 3,
            "timeout_seconds": 30,
        },
        "storage": {
            "path": "",
        },
        "sync": {
            "stabilize_delay": 1.0,
            "interval_seconds": 30,
            "probe_path": "/api/workouts",
            "probe_timeout": 5,
            "force_offline": False,
        },
        "defaults": {
            "view": "all",
        },
    }


DEFAULT_CONFIG: Config = _default_config()


def _layer(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` on a copy of ``base``."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        current = result.get(key)
        result[key] = _layer(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return result


def _parse_file(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text()
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    else:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a table at the root")
    return data


def validate_config(config: Config) -> Config:
    """Reject values the rest of the CLI cannot work with."""
    for section, values in config.items():
        if section in DEFAULT_CONFIG and not isinstance(values, dict):
            raise ConfigError(f"[{section}] must be a table")

    api = config["api"]
    if not isinstance(api.get("max_retries"), int) or api["max_retries"] < 1:
        raise ConfigError("api.max_retries must be a positive integer")
    for key in ("rate_limit_delay", "timeout_seconds"):
        if not isinstance(api.get(key), (int, float)) or api[key] < 0:
            raise ConfigError(f"api.{key} must be a non-negative number")

    sync = config["sync"]
    for key in ("stabilize_delay", "interval_seconds", "probe_timeout"):
        if not isinstance(sync.get(key), (int, float)) or sync[key] < 0:
            raise ConfigError(f"sync.{key} must be a non-negative number")
    if not isinstance(sync.get("force_offline"), bool):
        raise ConfigError("sync.force_offline must be true or false")

    view = config["defaults"].get("view")
    if view not in VIEW_MODES:
        raise ConfigError(f"defaults.view must be one of: {', '.join(VIEW_MODES)}")
    return config


def read_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Only the values written in the config file, without defaults."""
    cfg_path = path or default_config_path()
    if not cfg_path.exists():
        return {}
    return _parse_file(cfg_path)


def load_config(path: Optional[Path] = None) -> Config:
    """Defaults overlaid with the config file, if there is one."""
    return validate_config(_layer(_default_config(), read_config_file(path)))


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    raise TypeError(f"Cannot write {type(value).__name__} to TOML")


def dumps_toml(config: Config) -> str:
    """Render the two-level config as TOML, one table per section."""
    blocks = []
    for section, values in config.items():
        if not isinstance(values, dict):
            continue
        lines = [f"[{section}]"]
        lines.extend(f"{key} = {_format_value(value)}" for key, value in values.items() if value is not None)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    """Write config as TOML, or JSON when the path ends in ``.json``."""
    cfg_path = path or default_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.suffix.lower() == ".json":
        cfg_path.write_text(json.dumps(config, indent=2) + "\n")
    else:
        cfg_path.write_text(dumps_toml(config))
    return cfg_path


def resolve_storage_path(config: Config) -> Path:
    """Local storage file: ``WT_STORAGE_FILE``, then ``storage.path``, then the data dir."""
    raw = os.getenv("WT_STORAGE_FILE") or config.get("storage", {}).get("path")
    return expand_path(raw or str(default_data_dir() / "local-storage.json"))


def resolve_base_url(config: Config) -> str:
    raw = os.getenv("WT_BASE_URL") or config.get("api", {}).get("base_url") or DEFAULT_BASE_URL
    return str(raw).rstrip("/")


def resolve_token(config: Config) -> str:
    """Session token sent as the ``token`` cookie."""
    return str(os.getenv("WT_TOKEN") or config.get("api", {}).get("token") or "")
