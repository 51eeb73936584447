from __future__ import annotations

from pathlib import Path

import pytest

NOW = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every config lookup at an empty temporary directory."""
    home = tmp_path / "claude-home"
    home.mkdir()
    monkeypatch.setenv("CLAUDE_CONFIG_DIR", str(home))
    monkeypatch.delenv("HECA_COLS", raising=False)
    monkeypatch.delenv("HECA_ROWS", raising=False)
    monkeypatch.delenv("CLAUDE_DASHBOARD_LOG_FILE", raising=False)
    monkeypatch.delenv("CLAUDE_DASHBOARD_LOG_LEVEL", raising=False)
    return home


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
