"""Unit tests for view assembly."""

from datetime import datetime, timedelta, timezone

import pytest

from claude_dashboard.palette import BAR_EMPTY, BAR_FILLED, STYLE
from claude_dashboard.state import Config, MetricsSnapshot, UsageWindow, ViewModel
from claude_dashboard.text import strip_ansi
from claude_dashboard.view import (
    FETCH_FAILED_TEXT,
    KEY_HINT,
    LOADING_TEXT,
    NO_DATA_TEXT,
    build_lines,
)

NOW = 1_700_000_000.0
NOW_DT = datetime.fromtimestamp(NOW, tz=timezone.utc)
WIDTH = 72


def plain(lines: list[str]) -> list[str]:
    return [strip_ansi(line) for line in lines]


def bar_lines(lines: list[str]) -> list[str]:
    return [line for line in plain(lines) if BAR_FILLED in line or BAR_EMPTY in line]


def loaded(metrics: MetricsSnapshot | None, **kwargs) -> ViewModel:
    model = ViewModel(loading=False, metrics=metrics, started_at=NOW - 600, **kwargs)
    return model


class TestStatusViews:
    """Tests for the error and loading views."""

    def test_error_view(self) -> None:
        model = ViewModel(loading=False, error="No credentials found")
        lines = plain(build_lines(model, WIDTH, NOW))

        assert any("No credentials found" in line for line in lines)
        assert any("[r] Refresh  [ESC] Close" in line for line in lines)
        assert bar_lines(build_lines(model, WIDTH, NOW)) == []
        assert not any("Rate Limits" in line for line in lines)

    def test_error_wins_over_loading(self) -> None:
        model = ViewModel(loading=True, error="boom")
        lines = plain(build_lines(model, WIDTH, NOW))
        assert any("boom" in line for line in lines)
        assert not any(LOADING_TEXT in line for line in lines)

    def test_loading_view(self) -> None:
        lines = plain(build_lines(ViewModel(), WIDTH, NOW))
        assert any(LOADING_TEXT in line for line in lines)
        assert not any("Rate Limits" in line for line in lines)
        assert not any(KEY_HINT in line for line in lines)

    def test_title_always_present(self) -> None:
        for model in (ViewModel(), ViewModel(loading=False, error="x"), loaded(None)):
            assert any("Claude Dashboard" in line for line in plain(build_lines(model, WIDTH, NOW)))


class TestRateLimits:
    """Tests for the rate limit section."""

    def test_single_window_in_its_slot(self) -> None:
        snapshot = MetricsSnapshot(seven_day=UsageWindow("7d", 30.0))
        rows = bar_lines(build_lines(loaded(snapshot), WIDTH, NOW))
        assert len(rows) == 1
        assert rows[0].strip().startswith("7d")

    def test_fixed_order(self) -> None:
        snapshot = MetricsSnapshot(
            seven_day_secondary=UsageWindow("7d-S", 5.0),
            five_hour=UsageWindow("5h", 10.0),
            seven_day=UsageWindow("7d", 20.0),
        )
        rows = bar_lines(build_lines(loaded(snapshot), WIDTH, NOW))
        assert [row.split()[0] for row in rows] == ["5h", "7d", "7d-S"]

    def test_no_windows(self) -> None:
        lines = plain(build_lines(loaded(MetricsSnapshot()), WIDTH, NOW))
        assert any(NO_DATA_TEXT in line for line in lines)
        assert bar_lines(build_lines(loaded(MetricsSnapshot()), WIDTH, NOW)) == []

    def test_fetch_failed(self) -> None:
        lines = plain(build_lines(loaded(None), WIDTH, NOW))
        assert any(FETCH_FAILED_TEXT in line for line in lines)
        assert any("Check ~/.claude/.credentials.json" in line for line in lines)

    def test_five_hour_window_line(self) -> None:
        window = UsageWindow("5h", 42.0, resets_at=NOW_DT + timedelta(hours=2, minutes=5))
        lines = build_lines(loaded(MetricsSnapshot(five_hour=window)), WIDTH, NOW)
        styled = next(line for line in lines if BAR_FILLED in line)
        row = strip_ansi(styled)

        assert row.count(BAR_FILLED) == 11
        assert row.count(BAR_EMPTY) == 14
        assert f"{STYLE['ok']}42%" in styled
        assert row.endswith("(2h5m)")

    def test_no_countdown_without_reset(self) -> None:
        lines = build_lines(loaded(MetricsSnapshot(five_hour=UsageWindow("5h", 1.0))), WIDTH, NOW)
        row = bar_lines(lines)[0]
        assert "(" not in row

    def test_reset_in_past_shows_now(self) -> None:
        window = UsageWindow("5h", 99.0, resets_at=NOW_DT - timedelta(minutes=1))
        row = bar_lines(build_lines(loaded(MetricsSnapshot(five_hour=window)), WIDTH, NOW))[0]
        assert row.endswith("(now)")


class TestSections:
    """Tests for the model, session and account sections."""

    def test_default_effort_has_no_abbreviation(self) -> None:
        lines = plain(build_lines(loaded(None), WIDTH, NOW))
        assert any(line.strip() == "Model: Claude" for line in lines)

    def test_non_default_effort_abbreviated(self) -> None:
        lines = plain(build_lines(loaded(None, effort_level="medium"), WIDTH, NOW))
        assert any(line.strip() == "Model: [M] Claude" for line in lines)

    def test_session_line(self) -> None:
        lines = plain(build_lines(loaded(None, refresh_count=3), WIDTH, NOW))
        assert any(line.strip() == "Uptime: 10m  |  Refreshes: 3" for line in lines)

    def test_last_update_only_after_refresh(self) -> None:
        lines = plain(build_lines(loaded(None), WIDTH, NOW))
        assert not any("Last update" in line for line in lines)

        lines = plain(build_lines(loaded(None, last_refresh_at=NOW - 12), WIDTH, NOW))
        assert any(line.strip() == "Last update: 12s ago" for line in lines)

    def test_plan(self) -> None:
        lines = plain(build_lines(loaded(None, config=Config(plan="pro")), WIDTH, NOW))
        assert any(line.strip() == "Plan: Pro" for line in lines)

    def test_key_hint(self) -> None:
        lines = plain(build_lines(loaded(None), WIDTH, NOW))
        assert lines[-2].strip() == KEY_HINT


class TestDisplayModes:
    """Tests for compact / normal / detailed layouts."""

    @pytest.mark.parametrize(
        ("mode", "present", "absent"),
        [
            ("compact", ["Rate Limits"], ["Model:", "Session", "Account", "Last update"]),
            ("normal", ["Rate Limits", "Model:", "Session"], ["Account", "Last update"]),
            ("detailed", ["Rate Limits", "Model:", "Session", "Account", "Last update"], []),
        ],
    )
    def test_sections(self, mode: str, present: list[str], absent: list[str]) -> None:
        model = loaded(None, config=Config(display_mode=mode), last_refresh_at=NOW - 5)
        text = "\n".join(plain(build_lines(model, WIDTH, NOW)))
        for name in present:
            assert name in text
        for name in absent:
            assert name not in text

    def test_mode_does_not_change_loading_view(self) -> None:
        compact = ViewModel(config=Config(display_mode="compact"))
        detailed = ViewModel(config=Config(display_mode="detailed"))
        assert build_lines(compact, WIDTH, NOW) == build_lines(detailed, WIDTH, NOW)


class TestLongError:
    """Error text wider than the panel."""

    def test_truncated_to_panel(self) -> None:
        model = ViewModel(loading=False, error="Failed to fetch: " + "x" * 200)
        line = next(line for line in plain(build_lines(model, WIDTH, NOW)) if "Failed" in line)
        assert line.strip().endswith("...")
        assert len(line.strip()) == WIDTH - 4
