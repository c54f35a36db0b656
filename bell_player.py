"""Synthesized meditation bell played through sounddevice."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from interfaces import Scheduler, TimerHandle

try:
    import numpy as np
except Exception:  # pragma: no cover
    np = None  # type: ignore

try:
    import sounddevice as sd
except Exception:  # pragma: no cover
    sd = None  # type: ignore

logger = logging.getLogger(__name__)


def synthesize_bell_tone(
    sample_rate: int = 44100,
    duration_s: float = 1.5,
    frequency: float = 528.0,
    gain: float = 0.3,
) -> Any:
    """Bell-like tone: fundamental plus two harmonics under an exponential decay."""
    if np is None:
        raise RuntimeError("numpy is not installed")
    t = np.arange(int(sample_rate * duration_s), dtype=np.float64) / sample_rate
    fundamental = np.sin(2.0 * np.pi * frequency * t)
    harmonic2 = 0.5 * np.sin(2.0 * np.pi * frequency * 2.0 * t)
    harmonic3 = 0.3 * np.sin(2.0 * np.pi * frequency * 3.0 * t)
    envelope = np.exp(-3.0 * t)
    return ((fundamental + harmonic2 + harmonic3) * envelope * gain).astype(np.float32)


class SoundDeviceBellPlayer:
    def __init__(
        self,
        scheduler: Scheduler,
        sample_rate: int = 44100,
        strike_spacing_s: float = 1.0,
        haptic: Optional[Callable[[], None]] = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.strike_spacing_s = strike_spacing_s
        self._scheduler = scheduler
        self._haptic = haptic
        self._tone: Any = None
        self._pending: list[TimerHandle] = []
        self.skipped_strikes = 0

    def play_bell(self, strikes: int) -> None:
        if strikes < 1:
            return
        self._strike()
        for i in range(1, strikes):
            self._schedule_strike(i * self.strike_spacing_s)

    def stop(self) -> None:
        pending, self._pending = self._pending, []
        for handle in pending:
            handle.cancel()
        if sd is not None:
            sd.stop()

    def _schedule_strike(self, delay_s: float) -> None:
        handle: Optional[TimerHandle] = None

        def _fire() -> None:
            if handle in self._pending:
                self._pending.remove(handle)
            self._strike()

        handle = self._scheduler.call_later(delay_s, _fire)
        self._pending.append(handle)

    def _strike(self) -> None:
        if self._haptic is not None:
            self._haptic()
        if sd is None or np is None:
            self.skipped_strikes += 1
            logger.warning("bell skipped: sounddevice/numpy not installed")
            return
        try:
            if self._tone is None:
                self._tone = synthesize_bell_tone(self.sample_rate)
            sd.play(self._tone, samplerate=self.sample_rate)
        except Exception as exc:
            self.skipped_strikes += 1
            logger.warning("bell skipped: %s", exc)
