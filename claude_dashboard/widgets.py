"""Stateless formatters: percent colours, progress bars and durations."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from claude_dashboard.palette import BAR_EMPTY, BAR_FILLED, BOX_H, RESET, STYLE


def style(text: str, *names: str) -> str:
    codes = "".join(STYLE.get(name, "") for name in names)
    if not codes:
        return text
    return f"{codes}{text}{RESET}"


def round_half_away(value: float) -> int:
    """Round to the nearest integer with halves going away from zero (10.5 -> 11)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def percent_color(pct: float) -> str:
    if pct <= 50:
        return "ok"
    if pct <= 80:
        return "warn"
    return "danger"


def progress_bar(pct: float, width: int = 20) -> str:
    filled = max(0, min(width, round_half_away((pct / 100.0) * width)))
    empty = width - filled
    return (
        STYLE[percent_color(pct)]
        + BAR_FILLED * filled
        + STYLE["empty"]
        + BAR_EMPTY * empty
        + RESET
    )


def format_percent(pct: float) -> str:
    return style(f"{round_half_away(pct)}%", percent_color(pct))


def format_duration(ms: float) -> str:
    total_seconds = int(ms // 1000)
    hours, rem = divmod(total_seconds, 3600)
    minutes = rem // 60
    if hours > 0:
        return f"{hours}h{minutes}m" if minutes else f"{hours}h"
    return f"{minutes}m"


def format_countdown(resets_at: datetime | None, now: datetime | None = None) -> str:
    if resets_at is None:
        return ""
    if now is None:
        now = datetime.now(timezone.utc)
    remaining_ms = (resets_at - now).total_seconds() * 1000
    if remaining_ms <= 0:
        return "now"
    return format_duration(remaining_ms)


def separator(width: int) -> str:
    return style(BOX_H * max(0, width), "separator")
