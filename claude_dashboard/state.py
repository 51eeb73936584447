"""View model shared by the refresh controller, the dispatcher and the renderer."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Literal

Plan = Literal["max", "pro"]
DisplayMode = Literal["compact", "normal", "detailed"]
EffortLevel = Literal["low", "medium", "high"]

PLANS: tuple[Plan, ...] = ("max", "pro")
DISPLAY_MODES: tuple[DisplayMode, ...] = ("compact", "normal", "detailed")
EFFORT_LEVELS: tuple[EffortLevel, ...] = ("low", "medium", "high")

DEFAULT_PLAN: Plan = "max"
DEFAULT_DISPLAY_MODE: DisplayMode = "detailed"
DEFAULT_EFFORT: EffortLevel = "high"

DEFAULT_COLS = 80
DEFAULT_ROWS = 24


@dataclass(frozen=True)
class UsageWindow:
    label: str
    utilization: float
    resets_at: datetime | None = None


@dataclass(frozen=True)
class MetricsSnapshot:
    """Rate-limit windows from one fetch. A missing window was not reported."""

    five_hour: UsageWindow | None = None
    seven_day: UsageWindow | None = None
    seven_day_secondary: UsageWindow | None = None

    def windows(self) -> Iterator[UsageWindow]:
        for window in (self.five_hour, self.seven_day, self.seven_day_secondary):
            if window is not None:
                yield window

    def is_empty(self) -> bool:
        return next(self.windows(), None) is None


@dataclass
class Config:
    plan: Plan = DEFAULT_PLAN
    display_mode: DisplayMode = DEFAULT_DISPLAY_MODE


@dataclass
class TerminalSize:
    cols: int = DEFAULT_COLS
    rows: int = DEFAULT_ROWS


@dataclass
class ViewModel:
    loading: bool = True
    error: str | None = None
    metrics: MetricsSnapshot | None = None
    config: Config = field(default_factory=Config)
    effort_level: EffortLevel = DEFAULT_EFFORT
    started_at: float = field(default_factory=time.time)
    last_refresh_at: float | None = None
    refresh_count: int = 0
    terminal_size: TerminalSize = field(default_factory=TerminalSize)
