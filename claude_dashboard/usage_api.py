"""Client for the Claude OAuth usage endpoint."""

from __future__ import annotations

import asyncio
import http.client
import json
import urllib.error
import urllib.request
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from claude_dashboard import __version__
from claude_dashboard.state import MetricsSnapshot, UsageWindow

CLAUDE_USAGE_URL = "https://api.anthropic.com/api/oauth/usage"
ANTHROPIC_BETA = "oauth-2025-04-20"
USER_AGENT = f"claude-dashboard/{__version__}"
DEFAULT_TIMEOUT_MS = 5000

# Payload key -> (snapshot field, panel label). Aliases come after the preferred key.
WINDOW_KEYS: tuple[tuple[str, str, str], ...] = (
    ("five_hour", "five_hour", "5h"),
    ("seven_day", "seven_day", "7d"),
    ("seven_day_sonnet", "seven_day_secondary", "7d-S"),
    ("seven_day_opus", "seven_day_secondary", "7d-S"),
)

log = logger.bind(component="usage_api")


class UsageFetchError(RuntimeError):
    pass


def parse_iso(ts: Any) -> datetime | None:
    if not isinstance(ts, str) or not ts.strip():
        return None
    value = ts.strip()
    if value.endswith("Z"):
        value = f"{value[:-1]}+00:00"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_window(raw_window: Any, label: str) -> UsageWindow | None:
    if not isinstance(raw_window, dict):
        return None
    raw_pct = raw_window.get("utilization")
    if isinstance(raw_pct, bool):
        return None
    try:
        pct = float(raw_pct)
    except (TypeError, ValueError):
        return None
    return UsageWindow(
        label=label,
        utilization=max(0.0, min(pct, 100.0)),
        resets_at=parse_iso(raw_window.get("resets_at")),
    )


def parse_snapshot(payload: dict[str, Any]) -> MetricsSnapshot:
    windows: dict[str, UsageWindow] = {}
    for key, field_name, label in WINDOW_KEYS:
        if field_name in windows:
            continue
        window = parse_window(payload.get(key), label)
        if window is not None:
            windows[field_name] = window
    return MetricsSnapshot(**windows)


def request_usage_payload(token: str, timeout: float) -> dict[str, Any]:
    headers = {
        "Authorization": f"Bearer {token}",
        "anthropic-beta": ANTHROPIC_BETA,
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }
    req = urllib.request.Request(CLAUDE_USAGE_URL, method="GET", headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise UsageFetchError(f"HTTP {exc.code} from Claude usage API") from exc
    except urllib.error.URLError as exc:
        raise UsageFetchError(f"Network error reaching Claude usage API: {exc.reason}") from exc
    except TimeoutError as exc:
        raise UsageFetchError("Claude usage API timed out") from exc
    except http.client.HTTPException as exc:
        raise UsageFetchError(f"Bad HTTP response from Claude usage API: {exc!r}") from exc

    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise UsageFetchError("Claude usage API returned malformed JSON") from exc
    if not isinstance(payload, dict):
        raise UsageFetchError("Claude usage API returned unexpected payload.")
    return payload


async def fetch_usage(token: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> MetricsSnapshot | None:
    """One GET against the usage endpoint; every failure comes back as ``None``."""
    timeout = timeout_ms / 1000
    try:
        payload = await asyncio.wait_for(
            asyncio.to_thread(request_usage_payload, token, timeout),
            timeout,
        )
    except asyncio.TimeoutError:
        log.warning(f"Usage fetch exceeded {timeout_ms}ms")
        return None
    except (UsageFetchError, OSError) as exc:
        log.warning(f"Usage fetch failed: {exc}")
        return None
    snapshot = parse_snapshot(payload)
    log.debug(f"Fetched usage: {snapshot}")
    return snapshot
