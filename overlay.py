"""Countdown overlay window for the active session."""

from __future__ import annotations

try:
    from PySide6.QtCore import Qt, QTimer
    from PySide6.QtWidgets import QApplication, QLabel, QWidget, QVBoxLayout
except Exception:  # pragma: no cover
    Qt = None  # type: ignore
    QTimer = None  # type: ignore
    QApplication = None  # type: ignore
    QLabel = object  # type: ignore
    QWidget = object  # type: ignore
    QVBoxLayout = object  # type: ignore

from models import BreathingSettings


class OverlayWindow(QWidget):
    def __init__(self, settings: BreathingSettings | None = None) -> None:
        if Qt is None:
            raise RuntimeError("PySide6 is not installed")
        super().__init__()
        self.setWindowFlags(
            Qt.WindowStaysOnTopHint | Qt.FramelessWindowHint | Qt.Tool
        )
        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setFixedWidth(320)
        self._background = (settings or BreathingSettings()).background_color_hex

        self._time_label = QLabel("")
        self._time_label.setAlignment(Qt.AlignCenter)
        self._status_label = QLabel("")
        self._status_label.setAlignment(Qt.AlignCenter)
        self._reset_style()

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self._time_label)
        layout.addWidget(self._status_label)
        self.setLayout(layout)

        self._hide_timer: QTimer | None = None

    def _center_top(self) -> None:
        """Position the window at the top center of the primary screen."""
        if QApplication is None:
            return
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geom = screen.availableGeometry()
        self.adjustSize()
        x = geom.x() + (geom.width() - self.width()) // 2
        y = geom.y() + 40  # below the menu bar
        self.move(x, y)

    def show_countdown(self, remaining: str, status: str = "remaining") -> None:
        self._cancel_hide_timer()
        self._reset_style()
        self._time_label.setText(remaining)
        self._status_label.setText(status)
        self._center_top()
        self.show()

    def hide_with_delay(self, delay_ms: int = 400) -> None:
        self._cancel_hide_timer()
        if QTimer is not None:
            self._hide_timer = QTimer()
            self._hide_timer.setSingleShot(True)
            self._hide_timer.timeout.connect(self.hide)
            self._hide_timer.start(delay_ms)

    def show_error(self, text: str, hide_after_ms: int = 2500) -> None:
        """Show an error message and auto-hide after given ms."""
        self._status_label.setStyleSheet(
            "color: #FF6B6B; font-size: 14px; padding: 0 16px 12px 16px;"
            f"background: {self._background}; border-bottom-left-radius: 12px;"
            "border-bottom-right-radius: 12px;"
        )
        self._status_label.setText(text)
        self._center_top()
        self.show()
        self.hide_with_delay(hide_after_ms)

    def _cancel_hide_timer(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.stop()
            self._hide_timer = None

    def _reset_style(self) -> None:
        self._time_label.setStyleSheet(
            "color: white; font-size: 44px; font-weight: 200; padding: 12px 16px 0 16px;"
            f"background: {self._background}; border-top-left-radius: 12px;"
            "border-top-right-radius: 12px;"
        )
        self._status_label.setStyleSheet(
            "color: rgba(255,255,255,160); font-size: 14px; padding: 0 16px 12px 16px;"
            f"background: {self._background}; border-bottom-left-radius: 12px;"
            "border-bottom-right-radius: 12px;"
        )
