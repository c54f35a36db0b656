"""Core data models for the meditation timer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Union


class SessionMode(str, Enum):
    SILENT = "silent"
    GUIDED = "guided"


class SessionPhase(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    INTRO = "INTRO"
    COUNTING = "COUNTING"
    PAUSED = "PAUSED"
    COMPLETING = "COMPLETING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


TERMINAL_PHASES = frozenset({SessionPhase.COMPLETED, SessionPhase.ABORTED})


class CueKind(str, Enum):
    BELL = "bell"
    VOICEOVER = "voiceover"


# Voiceover clip ids, resolved to <assets_dir>/<clip_id>.wav by the player.
INTRO_CLIP = "guided_01"
FIRST_INSTRUCTION_CLIP = "guided_02"
SECOND_INSTRUCTION_CLIP = "guided_03"
CONCLUSION_CLIP = "guided_04"

SINGLE_STRIKE = 1
TRIPLE_STRIKE = 3


@dataclass(frozen=True)
class IntervalBell:
    minute_mark: int


@dataclass(frozen=True)
class GuidedVoiceover:
    offset_seconds: int


@dataclass(frozen=True)
class CompletionBell:
    pass


@dataclass(frozen=True)
class CompletionVoiceover:
    pass


CueKey = Union[IntervalBell, GuidedVoiceover, CompletionBell, CompletionVoiceover]


@dataclass(frozen=True)
class SessionConfig:
    total_duration: int
    mode: SessionMode = SessionMode.SILENT
    interval_bells_enabled: bool = True

    def __post_init__(self) -> None:
        if self.total_duration <= 0:
            raise ValueError(f"total_duration must be positive, got {self.total_duration}")

    @property
    def is_guided(self) -> bool:
        return self.mode == SessionMode.GUIDED

    @property
    def session_type(self) -> str:
        """Label stored with history records, e.g. ``"15min Guided"``."""
        label = f"{self.total_duration // 60}min"
        return f"{label} Guided" if self.is_guided else label

    @classmethod
    def from_minutes(
        cls, minutes: int, guided: bool = False, interval_bells_enabled: bool = True
    ) -> "SessionConfig":
        return cls(
            total_duration=minutes * 60,
            mode=SessionMode.GUIDED if guided else SessionMode.SILENT,
            interval_bells_enabled=interval_bells_enabled,
        )


@dataclass(frozen=True)
class CueRequest:
    """A cue the scheduler wants played, ``delay_s`` after the current tick."""

    kind: CueKind
    key: CueKey
    strikes: int = SINGLE_STRIKE
    clip_id: str = ""
    delay_s: float = 0.0


@dataclass(frozen=True)
class SessionTiming:
    tick_interval_s: float = 1.0
    preroll_delay_s: float = 3.0
    bell_settle_s: float = 4.0
    guided_voiceover_gap_s: float = 1.0
    completion_voiceover_delay_s: float = 4.5
    finish_delay_silent_s: float = 1.0
    finish_delay_guided_s: float = 8.0


@dataclass
class SessionRecord:
    session_type: str
    start_time: datetime
    duration: float
    completed: bool = True

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(seconds=self.duration)

    def to_dict(self) -> dict:
        return {
            "session_type": self.session_type,
            "start_time": self.start_time.isoformat(),
            "duration": self.duration,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionRecord":
        return cls(
            session_type=str(data["session_type"]),
            start_time=datetime.fromisoformat(data["start_time"]),
            duration=float(data["duration"]),
            completed=bool(data.get("completed", True)),
        )


@dataclass
class BreathingSettings:
    inhale_duration: float = 6.0
    exhale_duration: float = 6.0
    interval_bells_enabled: bool = True
    background_color_hex: str = "#8B9D83"
    circle_color_hex: str = "#F5F5DC"
