"""Turns the view model into the content lines of the panel."""

from __future__ import annotations

from datetime import datetime, timezone

from claude_dashboard import __version__
from claude_dashboard.state import DEFAULT_EFFORT, UsageWindow, ViewModel
from claude_dashboard.text import center, truncate
from claude_dashboard.widgets import (
    format_countdown,
    format_duration,
    format_percent,
    progress_bar,
    round_half_away,
    separator,
    style,
)

BAR_WIDTH = 25
LABEL_WIDTH = 5
INDENT = "  "

LOADING_TEXT = "Loading..."
ERROR_HINT = "[r] Refresh  [ESC] Close"
KEY_HINT = "[r] Refresh  [ESC] Close  [1] Compact  [2] Normal  [3] Detailed"
NO_DATA_TEXT = "No rate limit data available"
FETCH_FAILED_TEXT = "Failed to fetch rate limits"
FETCH_FAILED_HINT = "Check ~/.claude/.credentials.json"

EFFORT_ABBREVIATIONS = {"high": "H", "medium": "M", "low": "L"}
PLAN_NAMES = {"max": "Max", "pro": "Pro"}


def title_line(width: int) -> str:
    return center(style(" Claude Dashboard ", "title", "bold") + style(f"v{__version__}", "dim"), width)


def section_heading(name: str, width: int) -> list[str]:
    return [INDENT + style(name, "title", "bold"), INDENT + separator(width - 3)]


def window_line(window: UsageWindow, now: datetime) -> str:
    pct = round_half_away(window.utilization)
    line = (
        INDENT
        + style(window.label.ljust(LABEL_WIDTH), "label")
        + progress_bar(pct, BAR_WIDTH)
        + "  "
        + format_percent(pct)
    )
    countdown = format_countdown(window.resets_at, now)
    if countdown:
        line += style(f"  ({countdown})", "dim")
    return line


def rate_limit_lines(model: ViewModel, width: int, now: datetime) -> list[str]:
    lines = section_heading("Rate Limits", width)
    if model.metrics is None:
        lines.append(INDENT + style(FETCH_FAILED_TEXT, "warn"))
        lines.append(INDENT + style(FETCH_FAILED_HINT, "dim"))
    elif model.metrics.is_empty():
        lines.append(INDENT + style(NO_DATA_TEXT, "dim"))
    else:
        lines.extend(window_line(window, now) for window in model.metrics.windows())
    return lines


def effort_line(model: ViewModel) -> str:
    prefix = ""
    if model.effort_level != DEFAULT_EFFORT:
        prefix = f"[{EFFORT_ABBREVIATIONS.get(model.effort_level, 'H')}] "
    return INDENT + style("Model: ", "label") + style(prefix + "Claude", "value", "bold")


def session_lines(model: ViewModel, width: int, now: float, show_last_update: bool) -> list[str]:
    lines = section_heading("Session", width)
    uptime_ms = max(0.0, now - model.started_at) * 1000
    lines.append(
        INDENT
        + style("Uptime: ", "label")
        + style(format_duration(uptime_ms), "value")
        + style("  |  ", "dim")
        + style("Refreshes: ", "label")
        + style(str(model.refresh_count), "value")
    )
    if show_last_update and model.last_refresh_at is not None:
        ago = int(max(0.0, now - model.last_refresh_at))
        lines.append(INDENT + style("Last update: ", "label") + style(f"{ago}s ago", "dim"))
    return lines


def account_lines(model: ViewModel, width: int) -> list[str]:
    lines = section_heading("Account", width)
    plan = PLAN_NAMES.get(model.config.plan, "Max")
    lines.append(INDENT + style("Plan: ", "label") + style(plan, "value"))
    return lines


def build_lines(model: ViewModel, width: int, now: float) -> list[str]:
    """Content lines for the current state, ``now`` in epoch seconds.

    Error beats loading, and loading beats data. The data view depends on the
    display mode: ``compact`` shows rate limits only, ``normal`` adds the
    model and session summary, ``detailed`` adds the last update time and the
    account section.
    """
    lines = ["", title_line(width), ""]

    if model.error:
        lines.append(center(style(truncate(model.error, width - 4), "danger"), width))
        lines.append("")
        lines.append(center(style(ERROR_HINT, "dim"), width))
    elif model.loading:
        lines.append(center(style(LOADING_TEXT, "dim"), width))
    else:
        mode = model.config.display_mode
        now_dt = datetime.fromtimestamp(now, tz=timezone.utc)

        if mode != "compact":
            lines.append(effort_line(model))
            lines.append("")

        lines.extend(rate_limit_lines(model, width, now_dt))
        lines.append("")

        if mode != "compact":
            lines.extend(session_lines(model, width, now, show_last_update=mode == "detailed"))
            lines.append("")

        if mode == "detailed":
            lines.extend(account_lines(model, width))
            lines.append("")

        lines.append(INDENT + separator(width - 3))
        lines.append(INDENT + style(KEY_HINT, "dim"))

    lines.append("")
    return lines
