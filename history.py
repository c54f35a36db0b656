"""JSON-backed history of completed sessions."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional

from models import SessionRecord

logger = logging.getLogger(__name__)


class JsonSessionHistory:
    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path or Path.home() / ".config" / "vipassana" / "history.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def record_session_completed(self, session_type: str, start_time: datetime, duration: float) -> None:
        records = self._read_all()
        records.append(SessionRecord(session_type=session_type, start_time=start_time, duration=duration))
        self._write_all(records)
        logger.info("recorded %s session started %s", session_type, start_time.isoformat())

    def completed_sessions(self) -> list[SessionRecord]:
        return [r for r in self._read_all() if r.completed]

    def sessions_on(self, day: date) -> list[SessionRecord]:
        return [r for r in self.completed_sessions() if r.start_time.date() == day]

    def total_minutes(self) -> int:
        return total_minutes(self.completed_sessions())

    def current_streak(self, today: Optional[date] = None) -> int:
        return current_streak(self.completed_sessions(), today or date.today())

    def _read_all(self) -> list[SessionRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return [SessionRecord.from_dict(item) for item in data]
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as exc:
            logger.warning("ignoring unreadable history file %s: %s", self._path, exc)
            return []

    def _write_all(self, records: list[SessionRecord]) -> None:
        payload = [r.to_dict() for r in records]
        self._path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def total_minutes(records: Iterable[SessionRecord]) -> int:
    return sum(int(r.duration // 60) for r in records)


def current_streak(records: Iterable[SessionRecord], today: date) -> int:
    """Consecutive days with a session, ending today or yesterday."""
    days = {r.start_time.date() for r in records}
    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
