"""Simple JSON-based config store."""

from __future__ import annotations

import json
from pathlib import Path

from models import BreathingSettings

DEFAULT_ASSETS_DIR = Path(__file__).resolve().parent / "assets"


class JsonConfigStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path.home() / ".config" / "vipassana" / "config.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def get_interval_bells_enabled(self) -> bool:
        data = self._read_all()
        return bool(data.get("interval_bells_enabled", True))

    def set_interval_bells_enabled(self, enabled: bool) -> None:
        data = self._read_all()
        data["interval_bells_enabled"] = bool(enabled)
        self._write_all(data)

    def get_breathing_settings(self) -> BreathingSettings:
        data = self._read_all()
        defaults = BreathingSettings()
        return BreathingSettings(
            inhale_duration=_float(data.get("inhale_duration"), defaults.inhale_duration),
            exhale_duration=_float(data.get("exhale_duration"), defaults.exhale_duration),
            interval_bells_enabled=bool(data.get("interval_bells_enabled", True)),
            background_color_hex=str(data.get("background_color_hex", defaults.background_color_hex)),
            circle_color_hex=str(data.get("circle_color_hex", defaults.circle_color_hex)),
        )

    def set_breathing_durations(self, inhale: float, exhale: float) -> None:
        data = self._read_all()
        data["inhale_duration"] = float(inhale)
        data["exhale_duration"] = float(exhale)
        self._write_all(data)

    def get_hotkey(self) -> str:
        data = self._read_all()
        return str(data.get("hotkey", "Key.f8"))

    def set_hotkey(self, hotkey: str) -> None:
        data = self._read_all()
        data["hotkey"] = hotkey
        self._write_all(data)

    def get_assets_dir(self) -> Path:
        data = self._read_all()
        value = data.get("assets_dir")
        return Path(value) if value else DEFAULT_ASSETS_DIR

    def set_assets_dir(self, path: Path) -> None:
        data = self._read_all()
        data["assets_dir"] = str(path)
        self._write_all(data)

    def get_log_level(self) -> str:
        data = self._read_all()
        return str(data.get("log_level", "INFO"))

    def _read_all(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self._path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def _float(value: object, default: float) -> float:
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return result if result > 0 else default
