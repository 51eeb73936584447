"""Width arithmetic for strings that carry ANSI control sequences."""

from __future__ import annotations

import re

# CSI sequences (SGR colours, cursor movement, private modes). They occupy no cells.
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

ELLIPSIS = "..."


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def visible_len(text: str) -> int:
    return len(strip_ansi(text))


def pad(text: str, width: int) -> str:
    return text + " " * max(0, width - visible_len(text))


def center(text: str, width: int) -> str:
    # Left padding only; the box compositor pads the right side.
    return " " * (max(0, width - visible_len(text)) // 2) + text


def truncate(text: str, max_width: int) -> str:
    """Cut ``text`` to ``max_width`` cells, ending it with an ellipsis.

    The cut counts raw characters, so escapes before the cut point are kept
    and the visible result may be shorter than ``max_width``. Widths below 4
    leave no room for the ellipsis; such text is returned as an empty string.
    """
    if visible_len(text) <= max_width:
        return text
    if max_width < len(ELLIPSIS) + 1:
        return ""
    return text[: max_width - len(ELLIPSIS)] + ELLIPSIS
