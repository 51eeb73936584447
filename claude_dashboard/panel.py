"""Boxed panel compositor: frames content lines and paints them centred."""

from __future__ import annotations

from typing import TextIO

from claude_dashboard.palette import (
    BOX_BL,
    BOX_BR,
    BOX_H,
    BOX_TL,
    BOX_TR,
    BOX_V,
    CLEAR,
    CSI,
    HIDE_CURSOR,
    RESET,
    SHOW_CURSOR,
    STYLE,
)
from claude_dashboard.state import TerminalSize
from claude_dashboard.text import pad

MAX_BOX_WIDTH = 72


def box_width(size: TerminalSize) -> int:
    return min(size.cols, MAX_BOX_WIDTH)


def move_to(row: int, col: int) -> str:
    return f"{CSI}{row};{col}H"


def draw_box(lines: list[str], width: int) -> list[str]:
    """Frame ``lines`` in a ``width``-cell box.

    Each content row is a space, the line, then padding up to the right
    border. Lines wider than the box are left alone and overrun the border.
    """
    border = STYLE["border"]
    inner = max(0, width - 2)
    rows = [f"{border}{BOX_TL}{BOX_H * inner}{BOX_TR}{RESET}"]
    for line in lines:
        rows.append(
            f"{border}{BOX_V}{RESET} {pad(line, width - 3)}{border}{BOX_V}{RESET}"
        )
    rows.append(f"{border}{BOX_BL}{BOX_H * inner}{BOX_BR}{RESET}")
    return rows


def box_origin(size: TerminalSize, width: int, height: int) -> tuple[int, int]:
    row = max(1, (size.rows - height) // 2)
    col = max(1, (size.cols - width) // 2)
    return row, col


class Panel:
    """Full-redraw painter bound to the terminal output stream."""

    def __init__(self, out: TextIO):
        self.out = out

    def paint(self, lines: list[str], size: TerminalSize) -> None:
        width = box_width(size)
        rows = draw_box(lines, width)
        start_row, start_col = box_origin(size, width, len(rows))
        self.out.write(CLEAR + HIDE_CURSOR)
        for offset, row in enumerate(rows):
            self.out.write(move_to(start_row + offset, start_col) + STYLE["bg"] + row + RESET)
        self.out.flush()

    def restore(self) -> None:
        self.out.write(SHOW_CURSOR + RESET + CLEAR)
        self.out.flush()
