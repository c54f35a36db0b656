from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from history import JsonSessionHistory, current_streak
from models import SessionRecord


def _record(day: int, hour: int = 7, minutes: int = 15) -> SessionRecord:
    return SessionRecord(
        session_type=f"{minutes}min", start_time=datetime(2025, 11, day, hour), duration=minutes * 60.0
    )


def test_history_read_write(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    history = JsonSessionHistory(path=path)
    assert history.completed_sessions() == []

    history.record_session_completed("15min Guided", datetime(2025, 11, 5, 6, 45), 900.0)
    history.record_session_completed("30min", datetime(2025, 11, 5, 21, 0), 1800.0)

    reloaded = JsonSessionHistory(path=path)
    sessions = reloaded.completed_sessions()
    assert [s.session_type for s in sessions] == ["15min Guided", "30min"]
    assert sessions[0].end_time == datetime(2025, 11, 5, 7, 0)
    assert reloaded.total_minutes() == 45
    assert len(reloaded.sessions_on(date(2025, 11, 5))) == 2
    assert reloaded.sessions_on(date(2025, 11, 6)) == []


def test_history_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text("{invalid", encoding="utf-8")
    history = JsonSessionHistory(path=path)
    assert history.completed_sessions() == []
    assert history.current_streak(date(2025, 11, 5)) == 0


def test_streak_counts_back_from_today() -> None:
    records = [_record(3), _record(4), _record(5), _record(5, hour=20)]
    assert current_streak(records, date(2025, 11, 5)) == 3


def test_streak_counts_back_from_yesterday_when_today_is_empty() -> None:
    records = [_record(3), _record(4)]
    assert current_streak(records, date(2025, 11, 5)) == 2


def test_streak_broken_by_gap() -> None:
    records = [_record(1), _record(2), _record(4)]
    assert current_streak(records, date(2025, 11, 6)) == 0
    assert current_streak(records, date(2025, 11, 4)) == 1


def test_streak_empty() -> None:
    assert current_streak([], date(2025, 11, 5)) == 0
