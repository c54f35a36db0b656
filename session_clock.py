"""State-machine based meditation session clock."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from cue_scheduler import CueScheduler
from errors import ERROR_MESSAGES, PERSISTENCE_FAILED, PLAYBACK_FAILED
from interfaces import BellPlayer, PersistenceSink, Scheduler, TimerHandle, VoiceoverPlayer
from models import (
    CONCLUSION_CLIP,
    INTRO_CLIP,
    TERMINAL_PHASES,
    TRIPLE_STRIKE,
    CompletionBell,
    CompletionVoiceover,
    CueKey,
    CueKind,
    CueRequest,
    SessionConfig,
    SessionPhase,
    SessionRecord,
    SessionTiming,
)
from sequence import CueSequence

logger = logging.getLogger(__name__)

PhaseCallback = Callable[[SessionPhase, SessionPhase], None]
TickCallback = Callable[[int, int], None]
CueCallback = Callable[[CueRequest], None]
FinishedCallback = Callable[[SessionRecord], None]
DiscardedCallback = Callable[[], None]
ErrorCallback = Callable[[str, str], None]


class SessionClock:
    """Counts one session down and dispatches its cues.

    All work happens in callbacks on the injected scheduler; lifecycle calls
    return immediately. ``start``/``pause``/``resume``/``stop`` return
    ``False`` and change nothing when called in the wrong phase.

    ``pause`` only suspends the tick: cue callbacks already scheduled (the
    delayed second instruction, strikes of a bell in flight) still play.
    ``stop`` cancels everything that has not played yet.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        bell_player: BellPlayer,
        voiceover_player: VoiceoverPlayer,
        persistence: Optional[PersistenceSink] = None,
        timing: Optional[SessionTiming] = None,
        now: Callable[[], datetime] = datetime.now,
        on_phase_change: Optional[PhaseCallback] = None,
        on_tick: Optional[TickCallback] = None,
        on_cue: Optional[CueCallback] = None,
        on_finished: Optional[FinishedCallback] = None,
        on_discarded: Optional[DiscardedCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._scheduler = scheduler
        self._bell = bell_player
        self._voiceover = voiceover_player
        self._persistence = persistence
        self._timing = timing or SessionTiming()
        self._now = now
        self._on_phase_change = on_phase_change
        self._on_tick = on_tick
        self._on_cue = on_cue
        self._on_finished = on_finished
        self._on_discarded = on_discarded
        self._on_error = on_error

        self._phase = SessionPhase.NOT_STARTED
        self._config: Optional[SessionConfig] = None
        self._cue_scheduler: Optional[CueScheduler] = None
        self._elapsed = 0
        self._fired: set[CueKey] = set()
        self._start_time: Optional[datetime] = None
        self._tick_handle: Optional[TimerHandle] = None
        self._cue_handles: list[TimerHandle] = []
        self._sequence: Optional[CueSequence] = None
        self._breathing_active = False

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def config(self) -> Optional[SessionConfig]:
        return self._config

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def remaining(self) -> int:
        if self._config is None:
            return 0
        return max(0, self._config.total_duration - self._elapsed)

    @property
    def fired_cue_keys(self) -> frozenset:
        return frozenset(self._fired)

    @property
    def breathing_active(self) -> bool:
        return self._breathing_active

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, config: SessionConfig) -> bool:
        if self._phase != SessionPhase.NOT_STARTED:
            logger.debug("start() ignored in phase %s", self._phase.value)
            return False
        self._config = config
        self._cue_scheduler = CueScheduler(config, voiceover_gap_s=self._timing.guided_voiceover_gap_s)
        self._elapsed = 0
        self._fired = set()
        self._start_time = self._now()
        self._transition(SessionPhase.INTRO)

        sequence = CueSequence(self._scheduler, on_done=self._begin_counting)
        if config.is_guided:
            sequence.voiceover(self._voiceover, INTRO_CLIP)
        else:
            sequence.wait(self._timing.preroll_delay_s)
        sequence.call(lambda: self._ring(TRIPLE_STRIKE)).wait(self._timing.bell_settle_s)
        self._sequence = sequence
        sequence.run()
        return True

    def pause(self) -> bool:
        if self._phase != SessionPhase.COUNTING:
            logger.debug("pause() ignored in phase %s", self._phase.value)
            return False
        self._cancel_tick()
        self._breathing_active = False
        self._transition(SessionPhase.PAUSED)
        return True

    def resume(self) -> bool:
        if self._phase != SessionPhase.PAUSED:
            logger.debug("resume() ignored in phase %s", self._phase.value)
            return False
        self._breathing_active = True
        self._transition(SessionPhase.COUNTING)
        self._arm_tick()
        return True

    def stop(self) -> bool:
        if self._phase in TERMINAL_PHASES:
            logger.debug("stop() ignored in phase %s", self._phase.value)
            return False
        self._cancel_tick()
        self._cancel_pending_cues()
        self._breathing_active = False
        self._silence_players()
        self._transition(SessionPhase.ABORTED)
        logger.info("session discarded at %ss", self._elapsed)
        if self._on_discarded:
            self._on_discarded()
        return True

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    def _begin_counting(self) -> None:
        self._sequence = None
        if self._phase != SessionPhase.INTRO:
            return
        self._breathing_active = True
        self._transition(SessionPhase.COUNTING)
        for request in self._due_cues():
            self._dispatch(request)
        self._arm_tick()

    def _arm_tick(self) -> None:
        self._tick_handle = self._scheduler.call_later(self._timing.tick_interval_s, self._tick)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self) -> None:
        self._tick_handle = None
        if self._phase != SessionPhase.COUNTING or self._config is None:
            return
        self._elapsed = min(self._elapsed + 1, self._config.total_duration)
        if self._on_tick:
            self._on_tick(self._elapsed, self.remaining)
        due = self._due_cues()
        if self._elapsed >= self._config.total_duration:
            # Cues due on the final second go out after the completion bell.
            self._complete(trailing=due)
            return
        for request in due:
            self._dispatch(request)
        self._arm_tick()

    def _due_cues(self) -> list[CueRequest]:
        assert self._cue_scheduler is not None
        return self._cue_scheduler.evaluate(self._elapsed, self.remaining, self._fired)

    def _dispatch(self, request: CueRequest) -> None:
        if request.delay_s <= 0:
            self._play(request)
            return
        handle: Optional[TimerHandle] = None

        def _fire() -> None:
            if handle in self._cue_handles:
                self._cue_handles.remove(handle)
            self._play(request)

        handle = self._scheduler.call_later(request.delay_s, _fire)
        self._cue_handles.append(handle)

    def _play(self, request: CueRequest) -> None:
        if self._phase == SessionPhase.ABORTED:
            return
        if request.kind == CueKind.BELL:
            played = self._ring(request.strikes)
        else:
            played = self._speak(request.clip_id)
        if played:
            self._emit_cue(request)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _complete(self, trailing: Iterable[CueRequest] = ()) -> None:
        assert self._config is not None
        self._cancel_tick()
        self._breathing_active = False
        self._transition(SessionPhase.COMPLETING)

        timing = self._timing
        sequence = CueSequence(self._scheduler, on_done=self._finish)
        self._fired.add(CompletionBell())
        sequence.call(
            lambda: self._play(CueRequest(kind=CueKind.BELL, key=CompletionBell(), strikes=TRIPLE_STRIKE))
        )
        for request in trailing:
            sequence.call(lambda r=request: self._dispatch(r))
        if self._config.is_guided:
            self._fired.add(CompletionVoiceover())
            sequence.wait(timing.completion_voiceover_delay_s)
            sequence.call(
                lambda: self._play(
                    CueRequest(kind=CueKind.VOICEOVER, key=CompletionVoiceover(), clip_id=CONCLUSION_CLIP)
                )
            )
            sequence.wait(max(0.0, timing.finish_delay_guided_s - timing.completion_voiceover_delay_s))
        else:
            sequence.wait(timing.finish_delay_silent_s)
        self._sequence = sequence
        sequence.run()

    def _finish(self) -> None:
        self._sequence = None
        if self._phase != SessionPhase.COMPLETING or self._config is None:
            return
        self._transition(SessionPhase.COMPLETED)
        assert self._start_time is not None
        record = SessionRecord(
            session_type=self._config.session_type,
            start_time=self._start_time,
            duration=float(self._config.total_duration),
        )
        if self._persistence is not None:
            try:
                self._persistence.record_session_completed(
                    record.session_type, record.start_time, record.duration
                )
            except Exception as exc:
                logger.error("failed to record completed session: %s", exc)
                self._emit_error(PERSISTENCE_FAILED, str(exc))
        logger.info("session completed: %s", record.session_type)
        if self._on_finished:
            self._on_finished(record)

    # ------------------------------------------------------------------
    # Cue output
    # ------------------------------------------------------------------

    def _ring(self, strikes: int) -> bool:
        try:
            self._bell.play_bell(strikes)
        except Exception as exc:
            logger.warning("bell (%s strikes) skipped: %s", strikes, exc)
            self._emit_error(PLAYBACK_FAILED, str(exc))
            return False
        return True

    def _speak(self, clip_id: str) -> bool:
        try:
            self._voiceover.play(clip_id)
        except Exception as exc:
            logger.warning("voiceover %s skipped: %s", clip_id, exc)
            self._emit_error(PLAYBACK_FAILED, str(exc))
            return False
        return True

    def _emit_cue(self, request: CueRequest) -> None:
        logger.debug("cue fired: %s", request)
        if self._on_cue:
            self._on_cue(request)

    def _emit_error(self, code: str, message: str) -> None:
        if self._on_error:
            self._on_error(code, message or ERROR_MESSAGES.get(code, code))

    def _cancel_pending_cues(self) -> None:
        for handle in self._cue_handles:
            handle.cancel()
        self._cue_handles.clear()
        if self._sequence is not None:
            self._sequence.cancel()
            self._sequence = None

    def _silence_players(self) -> None:
        for player in (self._bell, self._voiceover):
            try:
                player.stop()
            except Exception as exc:
                logger.warning("failed to stop %s: %s", type(player).__name__, exc)

    def _transition(self, to_phase: SessionPhase) -> None:
        from_phase = self._phase
        if from_phase == to_phase:
            return
        self._phase = to_phase
        logger.info("session phase %s -> %s", from_phase.value, to_phase.value)
        if self._on_phase_change:
            self._on_phase_change(from_phase, to_phase)


def time_string(seconds: float) -> str:
    """``MM:SS`` as shown on the countdown."""
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"
