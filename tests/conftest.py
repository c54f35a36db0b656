from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

import pytest


class FakeHandle:
    def __init__(self, when: float, seq: int, callback: Callable[[], None]) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock: callbacks run only when ``advance`` passes their due time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[FakeHandle] = []
        self._seq = 0

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self.now + delay_s, self._seq, callback)
        self._seq += 1
        self._handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = max(self.now, handle.when)
            handle.callback()
        self.now = target

    @property
    def pending(self) -> int:
        return len([h for h in self._handles if not h.cancelled])


class FakeBellPlayer:
    def __init__(self, scheduler: FakeScheduler, fail: bool = False) -> None:
        self.scheduler = scheduler
        self.fail = fail
        self.calls: list[tuple[float, int]] = []
        self.stopped = 0

    def play_bell(self, strikes: int) -> None:
        if self.fail:
            raise RuntimeError("audio device unavailable")
        self.calls.append((self.scheduler.now, strikes))

    def stop(self) -> None:
        self.stopped += 1


class FakeVoiceoverPlayer:
    def __init__(self, scheduler: FakeScheduler, clip_length_s: float = 10.0, fail: bool = False) -> None:
        self.scheduler = scheduler
        self.clip_length_s = clip_length_s
        self.fail = fail
        self.calls: list[tuple[float, str]] = []
        self.stopped = 0

    def play(self, clip_id: str, on_complete: Optional[Callable[[], None]] = None) -> None:
        if self.fail:
            raise FileNotFoundError(f"{clip_id}.wav")
        self.calls.append((self.scheduler.now, clip_id))
        if on_complete is not None:
            self.scheduler.call_later(self.clip_length_s + 0.5, on_complete)

    def stop(self) -> None:
        self.stopped += 1


class FakeSink:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.records: list[tuple[str, datetime, float]] = []

    def record_session_completed(self, session_type: str, start_time: datetime, duration: float) -> None:
        if self.fail:
            raise OSError("disk full")
        self.records.append((session_type, start_time, duration))


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def bell(scheduler: FakeScheduler) -> FakeBellPlayer:
    return FakeBellPlayer(scheduler)


@pytest.fixture
def voiceover(scheduler: FakeScheduler) -> FakeVoiceoverPlayer:
    return FakeVoiceoverPlayer(scheduler)


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()
