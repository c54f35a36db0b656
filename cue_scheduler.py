"""Decides which cues are due on a given tick.

Silent sessions get a single bell on every 5-minute mark except the final
second, which belongs to the completion sequence. Guided sessions follow a
fixed checkpoint table instead; the table is trimmed to the session length
but is not stretched for sessions longer than 15 minutes. Checkpoint bells
skip the final second too, and a delayed instruction that would land after
the end of the session is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Set

from models import (
    CONCLUSION_CLIP,
    FIRST_INSTRUCTION_CLIP,
    SECOND_INSTRUCTION_CLIP,
    SINGLE_STRIKE,
    CueKey,
    CueKind,
    CueRequest,
    GuidedVoiceover,
    IntervalBell,
    SessionConfig,
)

logger = logging.getLogger(__name__)

INTERVAL_BELL_PERIOD_S = 300


@dataclass(frozen=True)
class GuidedCheckpoint:
    offset_s: int
    bell: bool = False
    clip_id: str = ""


GUIDED_CHECKPOINTS = (
    GuidedCheckpoint(0, bell=False, clip_id=FIRST_INSTRUCTION_CLIP),
    GuidedCheckpoint(300, bell=True, clip_id=SECOND_INSTRUCTION_CLIP),
    GuidedCheckpoint(600, bell=True),
    GuidedCheckpoint(900, bell=False, clip_id=CONCLUSION_CLIP),
)


def checkpoint_table(
    total_duration: int, checkpoints: Iterable[GuidedCheckpoint] = GUIDED_CHECKPOINTS
) -> tuple[GuidedCheckpoint, ...]:
    """Checkpoints reachable within ``total_duration``, ordered by offset."""
    return tuple(
        sorted((c for c in checkpoints if c.offset_s <= total_duration), key=lambda c: c.offset_s)
    )


class CueScheduler:
    def __init__(
        self,
        config: SessionConfig,
        voiceover_gap_s: float = 1.0,
        checkpoints: Optional[Iterable[GuidedCheckpoint]] = None,
    ) -> None:
        self._config = config
        self._voiceover_gap_s = voiceover_gap_s
        self._checkpoints = checkpoint_table(
            config.total_duration,
            GUIDED_CHECKPOINTS if checkpoints is None else checkpoints,
        )

    @property
    def checkpoints(self) -> tuple[GuidedCheckpoint, ...]:
        return self._checkpoints

    def evaluate(self, elapsed: int, remaining: int, fired: Set[CueKey]) -> list[CueRequest]:
        """Return the cues newly due at ``elapsed`` and add their keys to ``fired``.

        Bells are ordered before voiceovers.
        """
        if self._config.is_guided:
            requests = self._evaluate_guided(elapsed, remaining, fired)
        else:
            requests = self._evaluate_interval(elapsed, remaining, fired)
        requests.sort(key=lambda r: 0 if r.kind == CueKind.BELL else 1)
        for request in requests:
            logger.debug("cue due at %ss: %s", elapsed, request)
        return requests

    def _evaluate_interval(self, elapsed: int, remaining: int, fired: Set[CueKey]) -> list[CueRequest]:
        if not self._config.interval_bells_enabled:
            return []
        if elapsed <= 0 or remaining <= 0 or elapsed % INTERVAL_BELL_PERIOD_S != 0:
            return []
        key = IntervalBell(elapsed // 60)
        if key in fired:
            return []
        fired.add(key)
        return [CueRequest(kind=CueKind.BELL, key=key, strikes=SINGLE_STRIKE)]

    def _evaluate_guided(self, elapsed: int, remaining: int, fired: Set[CueKey]) -> list[CueRequest]:
        requests: list[CueRequest] = []
        for checkpoint in self._checkpoints:
            if elapsed < checkpoint.offset_s:
                break
            key = GuidedVoiceover(checkpoint.offset_s)
            if key in fired:
                continue
            fired.add(key)
            # The final second belongs to the completion bell.
            if checkpoint.bell and self._config.interval_bells_enabled and remaining > 0:
                requests.append(CueRequest(kind=CueKind.BELL, key=key, strikes=SINGLE_STRIKE))
            if not checkpoint.clip_id:
                continue
            delay_s = self._voiceover_gap_s if checkpoint.bell else 0.0
            if delay_s > 0 and delay_s >= remaining:
                logger.debug("dropping %s: session ends before it would play", checkpoint.clip_id)
                continue
            requests.append(
                CueRequest(kind=CueKind.VOICEOVER, key=key, clip_id=checkpoint.clip_id, delay_s=delay_s)
            )
        return requests
