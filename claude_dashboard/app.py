#!/usr/bin/env python3
"""Claude usage dashboard plugin for the Hecaton terminal."""

from __future__ import annotations

import argparse
import asyncio
import codecs
import signal
import sys
import time
from contextlib import contextmanager
from typing import Callable, Iterator, TextIO

from loguru import logger

from claude_dashboard import __version__
from claude_dashboard.credentials import get_credential
from claude_dashboard.host import Envelope, HostChannel, InboundMessage, Keystroke, apply_resize, decode_chunk
from claude_dashboard.logging import LogConfig, setup_logging, teardown_logging
from claude_dashboard.panel import Panel, box_width
from claude_dashboard.refresh import (
    REFRESH_INTERVAL,
    CredentialSource,
    PeriodicTimer,
    RefreshController,
    Sleep,
    UsageFetcher,
)
from claude_dashboard.settings import initial_terminal_size, load_config, load_effort_level
from claude_dashboard.state import DisplayMode, ViewModel
from claude_dashboard.usage_api import DEFAULT_TIMEOUT_MS, fetch_usage
from claude_dashboard.view import build_lines

READ_CHUNK = 4096

DISPLAY_MODE_KEYS: dict[str, DisplayMode] = {
    "1": "compact",
    "2": "normal",
    "3": "detailed",
}

log = logger.bind(component="app")


class Dashboard:
    """Owns the view model and routes every event to it.

    Keystrokes and host envelopes go through ``handle``; the refresh
    controller and the timer call back into ``render``.
    """

    def __init__(
        self,
        model: ViewModel,
        panel: Panel,
        host: HostChannel,
        get_credential: CredentialSource = get_credential,
        fetch_usage: UsageFetcher = fetch_usage,
        clock: Callable[[], float] = time.time,
        interval: float = REFRESH_INTERVAL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.model = model
        self.panel = panel
        self.host = host
        self.clock = clock
        self.refresher = RefreshController(
            model,
            get_credential=get_credential,
            fetch_usage=fetch_usage,
            on_change=self.render,
            clock=clock,
            timeout_ms=timeout_ms,
        )
        self.timer = PeriodicTimer(interval, self.refresher.trigger, sleep=sleep)
        self.closed = False
        self._stopped: asyncio.Event | None = None

    def render(self) -> None:
        if self.closed:
            return
        size = self.model.terminal_size
        self.panel.paint(build_lines(self.model, box_width(size), self.clock()), size)

    def handle(self, message: InboundMessage) -> None:
        if isinstance(message, Envelope):
            self.handle_envelope(message)
        elif isinstance(message, Keystroke):
            self.handle_key(message.key)

    def handle_envelope(self, envelope: Envelope) -> None:
        if envelope.method == "resize":
            if apply_resize(self.model.terminal_size, envelope.params):
                self.render()
        else:
            log.debug(f"Ignoring host method {envelope.method!r}")

    def handle_key(self, key: str) -> None:
        if key in ("r", "R"):
            self.refresher.trigger()
        elif key in ("q", "Q"):
            self.close()
        elif key in DISPLAY_MODE_KEYS:
            self.model.config.display_mode = DISPLAY_MODE_KEYS[key]
            self.render()

    def close(self, notify_host: bool = True) -> None:
        """Stop the timer, restore the terminal and, if asked, tell the host to close.

        Safe to call more than once; only the first call has any effect.
        """
        if self.closed:
            return
        self.closed = True
        self.timer.stop()
        self.refresher.cancel()
        try:
            self.panel.restore()
            if notify_host:
                self.host.request("close")
        finally:
            if self._stopped is not None:
                self._stopped.set()
            log.info("Dashboard closed")

    def start(self) -> None:
        self.render()
        self.model.config = load_config()
        self.model.effort_level = load_effort_level()
        self.refresher.trigger()
        self.timer.start()

    async def serve(self, reader: asyncio.StreamReader) -> None:
        self._stopped = asyncio.Event()
        pump = asyncio.get_running_loop().create_task(self._pump(reader))
        try:
            self.start()
            await self._stopped.wait()
        finally:
            pump.cancel()
            self.close(notify_host=False)
        if pump.done() and not pump.cancelled() and pump.exception() is not None:
            raise pump.exception()

    def stop(self) -> None:
        self.close(notify_host=False)

    async def _pump(self, reader: asyncio.StreamReader) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while not self.closed:
                data = await reader.read(READ_CHUNK)
                if not data:
                    log.info("Input closed")
                    return
                chunk = decoder.decode(data)
                if not chunk:
                    continue
                for message in decode_chunk(chunk):
                    self.handle(message)
                    if self.closed:
                        return
        finally:
            self.stop()


async def open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    return reader


@contextmanager
def cbreak_stdin(stream: TextIO) -> Iterator[None]:
    """Put an interactive stdin into cbreak mode; pipes are left alone."""
    if sys.platform == "win32" or not stream.isatty():
        yield
        return

    import termios
    import tty

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    tty.setcbreak(fd)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


async def serve(args: argparse.Namespace) -> None:
    model = ViewModel(terminal_size=initial_terminal_size(args.cols, args.rows))
    dashboard = Dashboard(
        model,
        panel=Panel(sys.stdout),
        host=HostChannel(sys.stderr),
        interval=args.interval,
        timeout_ms=int(args.timeout * 1000),
    )

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, dashboard.stop)
        except (NotImplementedError, RuntimeError):
            pass

    with cbreak_stdin(sys.stdin):
        reader = await open_stdin_reader()
        await dashboard.serve(reader)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="claude-dashboard",
        description="Show Claude usage and rate limits as a Hecaton overlay panel.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=REFRESH_INTERVAL,
        help=f"Auto-refresh interval in seconds (default: {REFRESH_INTERVAL:.0f})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_MS / 1000,
        help=f"Usage API timeout in seconds (default: {DEFAULT_TIMEOUT_MS / 1000:.0f})",
    )
    parser.add_argument(
        "--cols",
        type=int,
        default=None,
        help="Initial terminal width (default: $HECA_COLS or 80)",
    )
    parser.add_argument(
        "--rows",
        type=int,
        default=None,
        help="Initial terminal height (default: $HECA_ROWS or 24)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write logs to this file (default: $CLAUDE_DASHBOARD_LOG_FILE, logging off if unset)",
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Minimum log level (default: $CLAUDE_DASHBOARD_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.interval <= 0:
        print("--interval must be > 0", file=sys.stderr)
        return 2
    if args.timeout <= 0:
        print("--timeout must be > 0", file=sys.stderr)
        return 2

    handler_ids: list[int] = []
    try:
        handler_ids = setup_logging(LogConfig.from_env(args.log_file, args.log_level))
        log.info(f"Starting claude-dashboard {__version__}")
        asyncio.run(serve(args))
    except KeyboardInterrupt:
        return 0
    except Exception as exc:  # noqa: BLE001
        log.exception("Dashboard crashed")
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        teardown_logging(handler_ids)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
