"""Tests for SoundDeviceBellPlayer."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import numpy as np

import bell_player as bell_mod
from bell_player import SoundDeviceBellPlayer, synthesize_bell_tone
from conftest import FakeScheduler


# ---------------------------------------------------------------
# Tone synthesis
# ---------------------------------------------------------------

def test_synthesized_tone_shape_and_decay() -> None:
    tone = synthesize_bell_tone(sample_rate=44100, duration_s=1.5)
    assert tone.dtype == np.float32
    assert tone.shape == (66150,)
    # fundamental + harmonics peak at 1.8, scaled by 0.3
    assert float(np.max(np.abs(tone))) <= 0.3 * 1.8 + 1e-6
    head = float(np.max(np.abs(tone[:4410])))
    tail = float(np.max(np.abs(tone[-4410:])))
    assert tail < head / 10


# ---------------------------------------------------------------
# Strikes
# ---------------------------------------------------------------

@patch("bell_player.sd")
def test_single_strike_plays_immediately(mock_sd: MagicMock) -> None:
    scheduler = FakeScheduler()
    player = SoundDeviceBellPlayer(scheduler)
    player.play_bell(1)

    mock_sd.play.assert_called_once()
    assert mock_sd.play.call_args.kwargs["samplerate"] == 44100
    assert scheduler.pending == 0


@patch("bell_player.sd")
def test_triple_strike_is_spaced_one_second_apart(mock_sd: MagicMock) -> None:
    scheduler = FakeScheduler()
    strikes: list[float] = []
    player = SoundDeviceBellPlayer(scheduler, haptic=lambda: strikes.append(scheduler.now))
    player.play_bell(3)

    assert mock_sd.play.call_count == 1
    scheduler.advance(1.0)
    assert mock_sd.play.call_count == 2
    scheduler.advance(1.0)
    assert mock_sd.play.call_count == 3
    assert strikes == [0.0, 1.0, 2.0]


@patch("bell_player.sd")
def test_stop_cancels_remaining_strikes(mock_sd: MagicMock) -> None:
    scheduler = FakeScheduler()
    player = SoundDeviceBellPlayer(scheduler)
    player.play_bell(3)
    player.stop()
    scheduler.advance(5)

    assert mock_sd.play.call_count == 1
    mock_sd.stop.assert_called_once()


@patch("bell_player.sd")
def test_played_strikes_are_released(mock_sd: MagicMock) -> None:
    scheduler = FakeScheduler()
    player = SoundDeviceBellPlayer(scheduler)
    player.play_bell(3)
    assert len(player._pending) == 2

    scheduler.advance(2.0)
    assert mock_sd.play.call_count == 3
    assert player._pending == []


@patch("bell_player.sd")
def test_device_error_skips_strike(mock_sd: MagicMock) -> None:
    mock_sd.play.side_effect = RuntimeError("no output device")
    player = SoundDeviceBellPlayer(FakeScheduler())
    player.play_bell(1)  # must not raise
    assert player.skipped_strikes == 1


def test_missing_sounddevice_skips_strike(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(bell_mod, "sd", None)
    haptics: list[bool] = []
    player = SoundDeviceBellPlayer(FakeScheduler(), haptic=lambda: haptics.append(True))
    player.play_bell(1)
    assert player.skipped_strikes == 1
    assert haptics == [True]
