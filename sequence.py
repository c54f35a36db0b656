"""Ordered cue sequences for the pre-roll and completion stages."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from interfaces import Scheduler, TimerHandle, VoiceoverPlayer

logger = logging.getLogger(__name__)

Step = Callable[[Callable[[], None]], None]


class CueSequence:
    """Runs steps one after another on a scheduler.

    Each step receives an ``advance`` callback. Fixed waits are only used
    after fire-and-forget cues; voiceover steps advance on the player's own
    completion signal.
    """

    def __init__(self, scheduler: Scheduler, on_done: Optional[Callable[[], None]] = None) -> None:
        self._scheduler = scheduler
        self._on_done = on_done
        self._steps: list[Step] = []
        self._index = 0
        self._token = 0
        self._pending: Optional[TimerHandle] = None
        self._running = False
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._running

    def call(self, fn: Callable[[], None]) -> "CueSequence":
        def _step(advance: Callable[[], None]) -> None:
            try:
                fn()
            except Exception:
                logger.exception("sequence step failed, continuing")
            advance()

        self._steps.append(_step)
        return self

    def wait(self, seconds: float) -> "CueSequence":
        def _step(advance: Callable[[], None]) -> None:
            self._pending = self._scheduler.call_later(seconds, advance)

        self._steps.append(_step)
        return self

    def voiceover(self, player: VoiceoverPlayer, clip_id: str) -> "CueSequence":
        def _step(advance: Callable[[], None]) -> None:
            try:
                player.play(clip_id, on_complete=advance)
            except Exception:
                logger.exception("voiceover %s failed to start, continuing", clip_id)
                advance()

        self._steps.append(_step)
        return self

    def run(self) -> None:
        if self._running or self._cancelled:
            return
        self._running = True
        self._index = 0
        self._next()

    def cancel(self) -> None:
        self._cancelled = True
        self._running = False
        self._token += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _next(self) -> None:
        if not self._running:
            return
        if self._index >= len(self._steps):
            self._running = False
            if self._on_done:
                self._on_done()
            return
        step = self._steps[self._index]
        self._index += 1
        step(self._make_advance())

    def _make_advance(self) -> Callable[[], None]:
        token = self._token
        used = False

        def _advance() -> None:
            nonlocal used
            # Late or repeated completions from a cancelled or finished step are dropped.
            if used or token != self._token:
                return
            used = True
            self._pending = None
            self._next()

        return _advance
