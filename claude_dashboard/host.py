"""Host protocol: tells envelopes from keystrokes on stdin and sends requests on stderr.

Both directions use the same framing, a sentinel followed by a JSON-RPC 2.0
object and a newline:

    __HECA_RPC__{"jsonrpc": "2.0", "method": "resize", "params": {"cols": 120, "rows": 40}, "id": 7}
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, TextIO, Union

from loguru import logger

from claude_dashboard.state import TerminalSize

SENTINEL = "__HECA_RPC__"

# One keystroke: a whole CSI or SS3 sequence, ESC with an optional following
# character, or any other single character.
KEYSTROKE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]|\x1bO.|\x1b.?|.", re.DOTALL)

log = logger.bind(component="host")


@dataclass(frozen=True)
class Envelope:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: int | str | None = None


@dataclass(frozen=True)
class Keystroke:
    key: str


InboundMessage = Union[Envelope, Keystroke]


def parse_envelope(line: str) -> Envelope | None:
    if not line.startswith(SENTINEL):
        return None
    try:
        payload = json.loads(line[len(SENTINEL):].strip())
    except ValueError:
        log.debug(f"Ignoring malformed envelope: {line!r}")
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("method"), str):
        log.debug(f"Ignoring envelope without a method: {line!r}")
        return None
    params = payload.get("params")
    return Envelope(
        method=payload["method"],
        params=params if isinstance(params, dict) else {},
        id=payload.get("id"),
    )


def split_keystrokes(text: str) -> list[InboundMessage]:
    return [Keystroke(match.group(0)) for match in KEYSTROKE_RE.finditer(text)]


def decode_chunk(chunk: str) -> list[InboundMessage]:
    """Split one stdin chunk into envelopes and keystrokes, in arrival order.

    An envelope runs from a sentinel to the end of its line, or to the next
    sentinel when two arrive unterminated. The newline ending an envelope is
    part of it. Everything outside envelopes is keyboard input.
    """
    messages: list[InboundMessage] = []
    pos = 0
    while pos < len(chunk):
        start = chunk.find(SENTINEL, pos)
        if start < 0:
            messages.extend(split_keystrokes(chunk[pos:]))
            break
        messages.extend(split_keystrokes(chunk[pos:start]))

        newline = chunk.find("\n", start)
        stop = len(chunk) if newline < 0 else newline
        following = chunk.find(SENTINEL, start + len(SENTINEL))
        if 0 <= following < stop:
            stop = following

        envelope = parse_envelope(chunk[start:stop].strip())
        if envelope is not None:
            messages.append(envelope)
        pos = stop + 1 if stop == newline else stop
    return messages


def encode_envelope(method: str, params: dict[str, Any] | None = None, id: int | str = 1) -> str:
    rpc = json.dumps({"jsonrpc": "2.0", "method": method, "params": params or {}, "id": id})
    return f"{SENTINEL}{rpc}\n"


def _dimension(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = int(value)
    return number if number > 0 else None


def apply_resize(size: TerminalSize, params: dict[str, Any]) -> bool:
    """Update ``size`` from resize params. Missing or zero fields keep the old value."""
    cols = _dimension(params.get("cols"))
    rows = _dimension(params.get("rows"))
    if cols is None and rows is None:
        return False
    size.cols = cols or size.cols
    size.rows = rows or size.rows
    log.debug(f"Resized to {size.cols}x{size.rows}")
    return True


class HostChannel:
    """Outbound control requests, kept off the painted output stream."""

    def __init__(self, out: TextIO):
        self.out = out
        self._next_id = 1

    def request(self, method: str, params: dict[str, Any] | None = None) -> int:
        request_id = self._next_id
        self._next_id += 1
        self.out.write(encode_envelope(method, params, request_id))
        self.out.flush()
        log.debug(f"Sent {method!r} request #{request_id}")
        return request_id
