"""Configuration loader — reads optional YAML config and merges with defaults."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("~/.config/cstatus/config.yaml")

DEFAULTS = {
    "widgets": ["project", "git", "model", "session", "context", "block"],
    "context_window": 200_000,
    "block_hours": 5,
    "git_timeout": 2.0,
}


@dataclass
class CstatusConfig:
    widgets: list[str]
    context_window: int
    block_duration: timedelta
    git_timeout: float


def _read_yaml(config_path: Path) -> dict:
    if not config_path.is_file():
        return {}
    try:
        with open(config_path) as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", config_path, exc)
        return {}
    return loaded if isinstance(loaded, dict) else {}


def _positive_number(value: object, kind: type):
    # bool is an int subclass
    if isinstance(value, bool):
        raise TypeError("expected a number, got a boolean")
    number = kind(value)
    if not 0 < number < math.inf:
        raise ValueError(f"{value!r} is not a positive number")
    return number


def _widget_names(value: object) -> list[str]:
    if isinstance(value, str):
        return [w.strip() for w in value.split(",") if w.strip()]
    if isinstance(value, list):
        return [str(w) for w in value]
    raise TypeError(f"expected a list or comma-separated string, got {type(value).__name__}")


# Config key -> converter raising TypeError/ValueError/OverflowError on bad input
CONVERTERS = {
    "widgets": _widget_names,
    "context_window": lambda value: _positive_number(value, int),
    "block_hours": lambda value: timedelta(hours=_positive_number(value, float)),
    "git_timeout": lambda value: _positive_number(value, float),
}


def save_config_value(key: str, value: object, config_path: Path | None = None) -> None:
    """Update a single key in the config file, preserving other settings."""
    if config_path is None:
        config_path = CONFIG_PATH
    config_path = config_path.expanduser()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    existing = _read_yaml(config_path)
    existing[key] = value
    with open(config_path, "w") as f:
        yaml.dump(existing, f, default_flow_style=False)


def load_config(config_path: Path | None = None) -> CstatusConfig:
    """Load config from ~/.config/cstatus/config.yaml, merged with defaults.

    If no config file exists, return defaults (don't error). A malformed or
    unreadable file is logged and treated as missing, and each value that
    fails validation falls back to its own default, since the statusline
    must always render.
    """
    if config_path is None:
        config_path = CONFIG_PATH

    config_path = config_path.expanduser()
    user_config = _read_yaml(config_path)

    merged = {}
    for key, convert in CONVERTERS.items():
        if key in user_config:
            try:
                merged[key] = convert(user_config[key])
                continue
            except (TypeError, ValueError, OverflowError) as exc:
                logger.warning("Ignoring invalid %s in %s: %s", key, config_path, exc)
        merged[key] = convert(DEFAULTS[key])

    return CstatusConfig(
        widgets=merged["widgets"],
        context_window=merged["context_window"],
        block_duration=merged["block_hours"],
        git_timeout=merged["git_timeout"],
    )
