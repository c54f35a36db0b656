"""Application entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from bell_player import SoundDeviceBellPlayer
from config import JsonConfigStore
from errors import ERROR_MESSAGES
from history import JsonSessionHistory
from hotkey import GlobalHotkeyAdapter
from interfaces import ConfigStore, PersistenceSink, Scheduler
from log_setup import configure_logging
from models import SessionConfig, SessionPhase, SessionRecord, TERMINAL_PHASES
from session_clock import SessionClock, time_string
from timers import AsyncioScheduler, QtScheduler
from voiceover import WavVoiceoverPlayer

logger = logging.getLogger(__name__)

SESSION_MINUTES = (15, 30, 45, 60)
GUIDED_MINUTES = 15

ICON_IDLE = "#888888"      # grey
ICON_ACTIVE = "#8B9D83"    # sage
ICON_PAUSED = "#FF8800"    # orange

PHASE_STATUS = {
    SessionPhase.INTRO: "get ready",
    SessionPhase.COUNTING: "remaining",
    SessionPhase.PAUSED: "paused",
    SessionPhase.COMPLETING: "complete",
}


def build_clock(
    scheduler: Scheduler,
    config_store: ConfigStore,
    history: Optional[PersistenceSink],
    **callbacks,
) -> SessionClock:
    on_error = callbacks.get("on_error")
    return SessionClock(
        scheduler=scheduler,
        bell_player=SoundDeviceBellPlayer(scheduler),
        voiceover_player=WavVoiceoverPlayer(config_store.get_assets_dir(), scheduler, on_error=on_error),
        persistence=history,
        **callbacks,
    )


def run_headless(
    minutes: int,
    guided: bool,
    config_store: ConfigStore,
    history: Optional[PersistenceSink],
) -> int:
    """Run one session on an asyncio loop; 0 on completion, 130 when interrupted."""
    config = SessionConfig.from_minutes(
        minutes, guided=guided, interval_bells_enabled=config_store.get_interval_bells_enabled()
    )

    async def _run() -> int:
        loop = asyncio.get_running_loop()
        done: asyncio.Future[int] = loop.create_future()
        clock = build_clock(
            AsyncioScheduler(loop),
            config_store,
            history,
            on_tick=lambda elapsed, remaining: logger.debug("%s remaining", time_string(remaining)),
            on_finished=lambda record: done.done() or done.set_result(0),
            on_discarded=lambda: done.done() or done.set_result(130),
            on_error=lambda code, message: logger.warning("%s: %s", code, message),
        )
        clock.start(config)
        logger.info("starting %s session", config.session_type)
        try:
            return await done
        except asyncio.CancelledError:
            clock.stop()
            raise

    try:
        return asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("session interrupted")
        return 130


class App:
    def __init__(self, config_store: JsonConfigStore, history: JsonSessionHistory) -> None:
        from PySide6.QtCore import QObject, Signal
        from PySide6.QtWidgets import QApplication, QSystemTrayIcon

        from overlay import OverlayWindow

        class UIBridge(QObject):
            toggle_signal = Signal()

        self.app = QApplication(sys.argv)
        self.app.setQuitOnLastWindowClosed(False)
        self.config_store = config_store
        self.history = history
        self.scheduler = QtScheduler()
        self.overlay = OverlayWindow(config_store.get_breathing_settings())
        self.ui = UIBridge()
        self.ui.toggle_signal.connect(self._toggle_pause)
        self.clock: Optional[SessionClock] = None
        self.hotkey = GlobalHotkeyAdapter(hotkey_name=config_store.get_hotkey())

        self.tray = QSystemTrayIcon()
        self.tray.setIcon(_create_icon(ICON_IDLE))
        self.tray.setToolTip("Vipassana: Ready")
        self._setup_menu()
        self.tray.show()

    def _setup_menu(self) -> None:
        from PySide6.QtGui import QAction
        from PySide6.QtWidgets import QMenu

        menu = QMenu()
        for minutes in SESSION_MINUTES:
            action = QAction(f"Meditate {minutes} min", menu)
            action.triggered.connect(lambda _=False, m=minutes: self._start(m, guided=False))
            menu.addAction(action)
        guided_action = QAction(f"Guided {GUIDED_MINUTES} min", menu)
        guided_action.triggered.connect(lambda _=False: self._start(GUIDED_MINUTES, guided=True))
        menu.addAction(guided_action)

        menu.addSeparator()
        pause_action = QAction("Pause / Resume", menu)
        pause_action.triggered.connect(self._toggle_pause)
        menu.addAction(pause_action)
        end_action = QAction("End Session", menu)
        end_action.triggered.connect(self._end_session)
        menu.addAction(end_action)

        menu.addSeparator()
        bells_action = QAction("Interval Bells", menu)
        bells_action.setCheckable(True)
        bells_action.setChecked(self.config_store.get_interval_bells_enabled())
        bells_action.toggled.connect(self.config_store.set_interval_bells_enabled)
        menu.addAction(bells_action)
        stats_action = QAction("Stats", menu)
        stats_action.triggered.connect(self._show_stats)
        menu.addAction(stats_action)

        menu.addSeparator()
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self.quit)
        menu.addAction(quit_action)

        self._menu = menu
        self.tray.setContextMenu(menu)

    # ------------------------------------------------------------------
    # Session control (Qt thread)
    # ------------------------------------------------------------------

    def _session_active(self) -> bool:
        return self.clock is not None and self.clock.phase not in TERMINAL_PHASES

    def _start(self, minutes: int, guided: bool) -> None:
        if self._session_active():
            return
        config = SessionConfig.from_minutes(
            minutes,
            guided=guided,
            interval_bells_enabled=self.config_store.get_interval_bells_enabled(),
        )
        self.clock = build_clock(
            self.scheduler,
            self.config_store,
            self.history,
            on_phase_change=self._on_phase_change,
            on_tick=self._on_tick,
            on_finished=self._on_finished,
            on_discarded=self._on_discarded,
            on_error=self._on_error,
        )
        self.clock.start(config)

    def _toggle_pause(self) -> None:
        if self.clock is None:
            return
        if self.clock.phase == SessionPhase.COUNTING:
            self.clock.pause()
        elif self.clock.phase == SessionPhase.PAUSED:
            self.clock.resume()

    def _end_session(self) -> None:
        from PySide6.QtWidgets import QMessageBox

        if not self._session_active():
            return
        answer = QMessageBox.question(
            None,
            "End Session?",
            "Are you sure you want to end this meditation session? Your progress won't be saved.",
        )
        if answer == QMessageBox.Yes and self.clock is not None:
            self.clock.stop()

    def _show_stats(self) -> None:
        from PySide6.QtWidgets import QMessageBox

        sessions = self.history.completed_sessions()
        QMessageBox.information(
            None,
            "Your Journey",
            f"Sessions: {len(sessions)}\n"
            f"Total minutes: {self.history.total_minutes()}\n"
            f"Current streak: {self.history.current_streak()} days",
        )

    # ------------------------------------------------------------------
    # Clock callbacks
    # ------------------------------------------------------------------

    def _on_phase_change(self, from_phase: SessionPhase, to_phase: SessionPhase) -> None:
        if to_phase in (SessionPhase.INTRO, SessionPhase.COUNTING):
            self.tray.setIcon(_create_icon(ICON_ACTIVE))
        elif to_phase == SessionPhase.PAUSED:
            self.tray.setIcon(_create_icon(ICON_PAUSED))
        elif to_phase in TERMINAL_PHASES:
            self.tray.setIcon(_create_icon(ICON_IDLE))
            self.tray.setToolTip("Vipassana: Ready")
        status = PHASE_STATUS.get(to_phase)
        if status and self.clock is not None:
            self.overlay.show_countdown(time_string(self.clock.remaining), status)

    def _on_tick(self, elapsed: int, remaining: int) -> None:
        text = time_string(remaining)
        self.tray.setToolTip(f"Vipassana: {text} remaining")
        self.overlay.show_countdown(text)

    def _on_finished(self, record: SessionRecord) -> None:
        self.overlay.hide_with_delay(400)
        self.tray.showMessage("Session complete", f"{record.session_type} meditation finished.")

    def _on_discarded(self) -> None:
        self.overlay.hide_with_delay(400)

    def _on_error(self, code: str, message: str) -> None:
        logger.warning("%s: %s", code, message)
        self.overlay.show_error(ERROR_MESSAGES.get(code, message))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        try:
            # pynput calls back on its own thread; the signal hops to the Qt thread.
            self.hotkey.start(on_toggle=self.ui.toggle_signal.emit)
        except Exception as exc:
            self.overlay.show_error(f"Hotkey disabled: {exc}")
        return self.app.exec()

    def quit(self) -> None:
        self.hotkey.stop()
        if self.clock is not None:
            self.clock.stop()
        self.app.quit()


def _create_icon(color: str = ICON_IDLE, size: int = 22):
    """Generate a simple circular tray icon with the given color."""
    from PySide6.QtCore import QSize
    from PySide6.QtGui import QBrush, QColor, QIcon, QPainter, QPixmap

    pixmap = QPixmap(QSize(size, size))
    pixmap.fill(QColor(0, 0, 0, 0))
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing, True)
    painter.setBrush(QBrush(QColor(color)))
    painter.setPen(QColor(color))
    painter.drawEllipse(2, 2, size - 4, size - 4)
    painter.end()
    return QIcon(pixmap)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Vipassana meditation timer")
    ap.add_argument("--headless", action="store_true", help="run one session without the tray UI")
    ap.add_argument("--minutes", type=int, default=15, help="session length in minutes")
    ap.add_argument("--guided", action="store_true", help="guided session with voiceovers")
    ap.add_argument("--config", type=Path, default=None, help="config file path")
    ap.add_argument("--history", type=Path, default=None, help="history file path")
    ap.add_argument("--log-file", type=Path, default=None)
    args = ap.parse_args(argv)
    if args.minutes <= 0:
        ap.error("--minutes must be positive")
    return args


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    config_store = JsonConfigStore(path=args.config)
    configure_logging(config_store.get_log_level(), args.log_file)
    history = JsonSessionHistory(path=args.history)

    if args.headless:
        return run_headless(args.minutes, args.guided, config_store, history)

    try:
        app = App(config_store, history)
    except ImportError as exc:  # pragma: no cover
        raise SystemExit(f"PySide6 is required to run the desktop app: {exc}")
    return app.run()


if __name__ == "__main__":
    raise SystemExit(main())
