"""Named styles shared by every layer that draws."""

from __future__ import annotations

CSI = "\x1b["

RESET = f"{CSI}0m"
BOLD = f"{CSI}1m"
DIM = f"{CSI}2m"

CLEAR = f"{CSI}2J{CSI}H"
HIDE_CURSOR = f"{CSI}?25l"
SHOW_CURSOR = f"{CSI}?25h"


def _fg(r: int, g: int, b: int) -> str:
    return f"{CSI}38;2;{r};{g};{b}m"


def _bg(r: int, g: int, b: int) -> str:
    return f"{CSI}48;2;{r};{g};{b}m"


STYLE = {
    "bg": _bg(30, 16, 12),
    "title": _fg(215, 105, 70),
    "label": _fg(180, 180, 200),
    "value": _fg(255, 255, 255),
    "dim": _fg(120, 100, 95),
    "ok": _fg(120, 220, 150),
    "warn": _fg(230, 200, 100),
    "danger": _fg(230, 110, 110),
    "cyan": _fg(100, 200, 230),
    "orange": _fg(230, 170, 100),
    "border": _fg(100, 55, 45),
    "separator": _fg(75, 45, 38),
    "empty": _fg(120, 100, 95),
    "bold": BOLD,
}

# Single-line box glyphs.
BOX_H = "─"
BOX_V = "│"
BOX_TL = "┌"
BOX_TR = "┐"
BOX_BL = "└"
BOX_BR = "┘"

BAR_FILLED = "█"
BAR_EMPTY = "░"
