"""In-app banner that slides a phase notification over the main window.

Usage::

    banner = BannerToast(parent_widget)
    dispatcher.banner.connect(banner.show_notification)
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer, QPropertyAnimation, QEasingCurve
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QGraphicsOpacityEffect,
)

from ..notify.events import Notification
from ..timer.engine import PhaseEventKind


ACCENTS: dict[PhaseEventKind, str] = {
    PhaseEventKind.WORK_STARTED: "#F38BA8",
    PhaseEventKind.WORK_COMPLETED: "#A6E3A1",
    PhaseEventKind.BREAK_STARTED: "#89B4FA",
    PhaseEventKind.BREAK_COMPLETED: "#F9E2AF",
}


class BannerToast(QWidget):
    """Fades in, holds, then fades out.  A new banner replaces the old one."""

    DISPLAY_MS = 3500
    FADE_IN_MS = 250
    FADE_OUT_MS = 800

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setFixedWidth(340)
        self.hide()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(18, 10, 18, 10)
        layout.setSpacing(2)

        self._title_label = QLabel("", self)
        self._title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._title_label)

        self._body_label = QLabel("", self)
        self._body_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._body_label.setWordWrap(True)
        layout.addWidget(self._body_label)

        self._opacity = QGraphicsOpacityEffect(self)
        self.setGraphicsEffect(self._opacity)
        self._opacity.setOpacity(0.0)

        self._fade_anim = QPropertyAnimation(self._opacity, b"opacity", self)
        self._fade_anim.finished.connect(self._on_fade_finished)

        self._dismiss_timer = QTimer(self)
        self._dismiss_timer.setSingleShot(True)
        self._dismiss_timer.timeout.connect(self._fade_out)

        self._current: Notification | None = None

    @property
    def current(self) -> Notification | None:
        """The notification on screen, None once it has faded out."""
        return self._current

    @property
    def title_text(self) -> str:
        return self._title_label.text()

    @property
    def body_text(self) -> str:
        return self._body_label.text()

    def show_notification(self, notification: Notification) -> None:
        self._current = notification
        accent = ACCENTS.get(notification.event.kind, "#CBA6F7")
        self.setStyleSheet(
            "BannerToast {"
            "  background-color: rgba(35, 35, 64, 220);"
            f"  border: 1px solid {accent};"
            "  border-radius: 12px;"
            "}"
        )
        self._title_label.setStyleSheet(
            f"font-size: 16px; font-weight: 700; color: {accent};"
            "background: transparent; border: none;"
        )
        self._body_label.setStyleSheet(
            "font-size: 12px; color: #CDD6F4; background: transparent; border: none;"
        )
        self._title_label.setText(notification.title)
        self._body_label.setText(notification.body)

        self.adjustSize()
        self._position()
        self.show()
        self.raise_()

        self._animate(0.0, 1.0, self.FADE_IN_MS, QEasingCurve.Type.OutCubic)
        self._dismiss_timer.start(self.DISPLAY_MS)

    def _fade_out(self) -> None:
        self._animate(1.0, 0.0, self.FADE_OUT_MS, QEasingCurve.Type.InCubic)

    def _animate(self, start: float, end: float, ms: int, curve: QEasingCurve.Type) -> None:
        self._fade_anim.stop()
        self._fade_anim.setDuration(ms)
        self._fade_anim.setStartValue(start)
        self._fade_anim.setEndValue(end)
        self._fade_anim.setEasingCurve(curve)
        self._fade_anim.start()

    def _on_fade_finished(self) -> None:
        if self._fade_anim.endValue() == 0.0:
            self.hide()
            self._current = None

    def _position(self) -> None:
        """Centre horizontally near the top of the parent."""
        if self.parent():
            x = (self.parent().width() - self.width()) // 2
            self.move(max(0, x), 16)
