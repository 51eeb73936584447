"""Local preference files and host-provided terminal size."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from claude_dashboard.state import (
    DEFAULT_COLS,
    DEFAULT_DISPLAY_MODE,
    DEFAULT_EFFORT,
    DEFAULT_PLAN,
    DEFAULT_ROWS,
    DISPLAY_MODES,
    EFFORT_LEVELS,
    PLANS,
    Config,
    EffortLevel,
    TerminalSize,
)

CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"
PREFERENCES_FILE = "claude-dashboard.local.json"
SETTINGS_FILE = "settings.json"
COLS_ENV = "HECA_COLS"
ROWS_ENV = "HECA_ROWS"

log = logger.bind(component="settings")


def config_dir() -> Path:
    env_path = os.environ.get(CONFIG_DIR_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".claude"


def _read_json_object(path: Path) -> dict[str, Any] | None:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.debug(f"Using defaults, could not read {path}: {exc}")
        return None
    if not isinstance(payload, dict):
        log.debug(f"Using defaults, {path} is not a JSON object")
        return None
    return payload


def _choice(value: Any, choices: tuple[str, ...], default: str) -> Any:
    return value if value in choices else default


def load_config() -> Config:
    payload = _read_json_object(config_dir() / PREFERENCES_FILE) or {}
    return Config(
        plan=_choice(payload.get("plan"), PLANS, DEFAULT_PLAN),
        display_mode=_choice(payload.get("displayMode"), DISPLAY_MODES, DEFAULT_DISPLAY_MODE),
    )


def load_effort_level() -> EffortLevel:
    payload = _read_json_object(config_dir() / SETTINGS_FILE) or {}
    return _choice(payload.get("effortLevel"), EFFORT_LEVELS, DEFAULT_EFFORT)


def _positive_int(value: Any) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def initial_terminal_size(cols: int | None = None, rows: int | None = None) -> TerminalSize:
    """Size from explicit values, then the host environment, then 80x24."""
    return TerminalSize(
        cols=_positive_int(cols) or _positive_int(os.environ.get(COLS_ENV)) or DEFAULT_COLS,
        rows=_positive_int(rows) or _positive_int(os.environ.get(ROWS_ENV)) or DEFAULT_ROWS,
    )
