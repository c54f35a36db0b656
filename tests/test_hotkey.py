from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

import hotkey as hotkey_mod
from hotkey import GlobalHotkeyAdapter


@patch("hotkey.keyboard")
def test_press_toggles_once_until_release(mock_keyboard: MagicMock) -> None:
    toggles: list[bool] = []
    adapter = GlobalHotkeyAdapter(hotkey_name="Key.f8")
    adapter.start(on_toggle=lambda: toggles.append(True))

    kwargs = mock_keyboard.Listener.call_args.kwargs
    on_press, on_release = kwargs["on_press"], kwargs["on_release"]

    on_press("Key.f8")
    on_press("Key.f8")  # key repeat
    assert toggles == [True]

    on_release("Key.f8")
    on_press("Key.f8")
    assert toggles == [True, True]

    on_press("Key.space")
    assert len(toggles) == 2

    adapter.stop()
    mock_keyboard.Listener.return_value.stop.assert_called_once()


def test_start_raises_without_pynput(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(hotkey_mod, "keyboard", None)
    with pytest.raises(RuntimeError, match="pynput is not installed"):
        GlobalHotkeyAdapter().start(on_toggle=lambda: None)
