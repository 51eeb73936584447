"""Logging configuration for the dashboard.

Logging goes through loguru and is disabled by default. stdout carries the
painted panel and stderr carries host control messages, so the only sink is
a log file:

    claude-dashboard --log-file ~/.claude/dashboard.log --log-level DEBUG

or, when the host starts the plugin:

    CLAUDE_DASHBOARD_LOG_FILE=~/.claude/dashboard.log
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]

LOG_FILE_ENV = "CLAUDE_DASHBOARD_LOG_FILE"
LOG_LEVEL_ENV = "CLAUDE_DASHBOARD_LOG_LEVEL"

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line}{extra[_ctx]} - {message}"
)


def _format_context(record: Any) -> str:
    component = record["extra"].get("component")
    return f" [{component}]" if component else ""


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum log level.
        file: Path to the log file. ``None`` keeps logging disabled.
        rotation: File rotation policy (e.g., "10 MB", "1 day").
        retention: Number of old log files to keep.
    """

    level: LogLevel = "INFO"
    file: str | None = None
    rotation: str = "10 MB"
    retention: int = 3

    @classmethod
    def from_env(cls, file: str | None = None, level: str | None = None) -> LogConfig:
        file = file or os.environ.get(LOG_FILE_ENV) or None
        level = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
        return cls(level=level, file=file)  # type: ignore[arg-type]


def setup_logging(config: LogConfig) -> list[int]:
    """Install the file sink described by ``config``.

    Returns:
        Handler IDs to pass to ``teardown_logging``.
    """
    # The default handler writes to stderr, which belongs to the host channel.
    logger.remove()
    if not config.file:
        return []

    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.configure(patcher=lambda r: r["extra"].update(_ctx=_format_context(r)))
    logger.enable("claude_dashboard")
    hid = logger.add(
        str(path),
        level=config.level,
        format=FILE_FORMAT,
        rotation=config.rotation,
        retention=config.retention,
        diagnose=False,
        enqueue=False,
    )
    return [hid]


def teardown_logging(handler_ids: list[int]) -> None:
    for hid in handler_ids:
        logger.remove(hid)
    logger.disable("claude_dashboard")
