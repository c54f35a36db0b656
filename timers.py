"""Delayed-callback schedulers backing the session clock."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

try:
    from PySide6.QtCore import QTimer
except Exception:  # pragma: no cover
    QTimer = None  # type: ignore

logger = logging.getLogger(__name__)


class AsyncioTimerHandle:
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> AsyncioTimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return AsyncioTimerHandle(loop.call_later(max(0.0, delay_s), _guarded(callback)))


class QtTimerHandle:
    def __init__(self, timer: object, owner: "QtScheduler") -> None:
        self._timer = timer
        self._owner = owner

    def cancel(self) -> None:
        self._timer.stop()  # type: ignore[attr-defined]
        self._owner._release(self._timer)


class QtScheduler:
    """Schedules callbacks as single-shot QTimers on the Qt thread."""

    def __init__(self) -> None:
        if QTimer is None:
            raise RuntimeError("PySide6 is not installed")
        self._timers: set = set()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer()
        timer.setSingleShot(True)
        guarded = _guarded(callback)

        def _fire() -> None:
            self._release(timer)
            guarded()

        timer.timeout.connect(_fire)
        self._timers.add(timer)
        timer.start(max(0, int(delay_s * 1000)))
        return QtTimerHandle(timer, self)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def _release(self, timer: object) -> None:
        self._timers.discard(timer)


def _guarded(callback: Callable[[], None]) -> Callable[[], None]:
    # Errors are logged here and never reach the event loop.
    def _run() -> None:
        try:
            callback()
        except Exception:
            logger.exception("scheduled callback failed")

    return _run
