"""Protocol interfaces used by SessionClock."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Protocol

from models import BreathingSettings


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class BellPlayer(Protocol):
    def play_bell(self, strikes: int) -> None: ...

    def stop(self) -> None: ...


class VoiceoverPlayer(Protocol):
    def play(self, clip_id: str, on_complete: Optional[Callable[[], None]] = None) -> None: ...

    def stop(self) -> None: ...


class PersistenceSink(Protocol):
    def record_session_completed(
        self, session_type: str, start_time: datetime, duration: float
    ) -> None: ...


class ConfigStore(Protocol):
    def get_interval_bells_enabled(self) -> bool: ...

    def set_interval_bells_enabled(self, enabled: bool) -> None: ...

    def get_breathing_settings(self) -> BreathingSettings: ...

    def get_hotkey(self) -> str: ...

    def set_hotkey(self, hotkey: str) -> None: ...

    def get_assets_dir(self) -> Path: ...