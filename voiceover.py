"""Guided voiceover player for WAV clips.

Clips are looked up as ``<assets_dir>/<clip_id>.wav``, decoded with the
standard ``wave`` module and handed to sounddevice, which interrupts whatever
clip was playing before. ``on_complete`` is scheduled for the clip's length
plus a short tail rather than driven by the audio device, so it always fires,
including when the clip is missing or broken.
"""

from __future__ import annotations

import logging
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from errors import ASSET_MISSING, PLAYBACK_FAILED
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

_SAMPLE_DTYPES = {1: "uint8", 2: "int16", 4: "int32"}


@dataclass
class VoiceoverClip:
    samples: Any
    sample_rate: int
    duration_s: float


def load_wav_clip(path: Path) -> VoiceoverClip:
    """Read a PCM WAV file into a (frames, channels) numpy array."""
    if np is None:
        raise RuntimeError("numpy is not installed")
    with wave.open(str(path), "rb") as wf:
        channels = wf.getnchannels()
        sample_width = wf.getsampwidth()
        sample_rate = wf.getframerate()
        n_frames = wf.getnframes()
        raw = wf.readframes(n_frames)
    dtype = _SAMPLE_DTYPES.get(sample_width)
    if dtype is None:
        raise ValueError(f"unsupported sample width: {sample_width} bytes")
    samples = np.frombuffer(raw, dtype=dtype).reshape(-1, channels)
    return VoiceoverClip(samples=samples, sample_rate=sample_rate, duration_s=n_frames / float(sample_rate))


class WavVoiceoverPlayer:
    def __init__(
        self,
        assets_dir: Path,
        scheduler: Scheduler,
        completion_tail_s: float = 0.5,
        on_error: Optional[Callable[[str, str], None]] = None,
    ) -> None:
        self._assets_dir = Path(assets_dir)
        self._scheduler = scheduler
        self._completion_tail_s = completion_tail_s
        self._on_error = on_error
        self._pending: list[TimerHandle] = []
        self.current_clip: Optional[str] = None

    def clip_path(self, clip_id: str) -> Path:
        return self._assets_dir / f"{clip_id}.wav"

    def play(self, clip_id: str, on_complete: Optional[Callable[[], None]] = None) -> None:
        path = self.clip_path(clip_id)
        if not path.exists():
            logger.warning("voiceover clip not found: %s", path)
            self._report(ASSET_MISSING, f"voiceover clip not found: {path.name}")
            self._schedule_completion(0.0, on_complete)
            return

        try:
            clip = load_wav_clip(path)
            if sd is None:
                raise RuntimeError("sounddevice is not installed")
            sd.play(clip.samples, samplerate=clip.sample_rate)
        except Exception as exc:
            logger.warning("voiceover %s failed: %s", clip_id, exc)
            self._report(PLAYBACK_FAILED, f"{clip_id}: {exc}")
            self._schedule_completion(0.0, on_complete)
            return

        self.current_clip = clip_id
        logger.info("playing voiceover %s (%.1fs)", clip_id, clip.duration_s)
        self._schedule_completion(clip.duration_s + self._completion_tail_s, on_complete)

    def stop(self) -> None:
        pending, self._pending = self._pending, []
        for handle in pending:
            handle.cancel()
        self.current_clip = None
        if sd is not None:
            sd.stop()

    def _schedule_completion(self, delay_s: float, on_complete: Optional[Callable[[], None]]) -> None:
        if on_complete is None:
            return
        handle: Optional[TimerHandle] = None

        def _fire() -> None:
            if handle in self._pending:
                self._pending.remove(handle)
            on_complete()

        handle = self._scheduler.call_later(delay_s, _fire)
        self._pending.append(handle)

    def _report(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message)
