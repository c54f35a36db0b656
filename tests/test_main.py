from __future__ import annotations

from pathlib import Path

import pytest

from config import JsonConfigStore
from conftest import FakeScheduler
from history import JsonSessionHistory
from main import build_clock, parse_args
from models import SessionConfig, SessionPhase


def test_parse_args_defaults() -> None:
    args = parse_args([])
    assert args.headless is False
    assert args.minutes == 15
    assert args.guided is False


def test_parse_args_headless_guided() -> None:
    args = parse_args(["--headless", "--minutes", "30", "--guided"])
    assert args.headless is True
    assert args.minutes == 30
    assert args.guided is True


def test_parse_args_rejects_non_positive_minutes() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--minutes", "0"])


def test_build_clock_wires_history(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    import bell_player
    import voiceover

    monkeypatch.setattr(bell_player, "sd", None)
    monkeypatch.setattr(voiceover, "sd", None)
    store = JsonConfigStore(path=tmp_path / "config.json")
    store.set_assets_dir(tmp_path)
    history = JsonSessionHistory(path=tmp_path / "history.json")
    scheduler = FakeScheduler()

    clock = build_clock(scheduler, store, history)
    clock.start(SessionConfig.from_minutes(1))
    scheduler.advance(7 + 60 + 2)

    assert clock.phase == SessionPhase.COMPLETED
    assert [s.session_type for s in history.completed_sessions()] == ["1min"]
