"""Window-title blink used when a phase event fires while unfocused."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .capabilities import AttentionCapability

logger = logging.getLogger(__name__)


BLINK_INTERVAL_MS = 1000
MAX_TOGGLES = 10
ATTENTION_PREFIX = "⏰ "


class TitleBlinker(QObject):
    """Alternates the window title between a message and the original.

    Stops after ``max_toggles`` title changes or as soon as the window
    regains focus, whichever comes first.  The focus listener is
    connected on :meth:`start` and removed again on :meth:`stop`.
    """

    finished = pyqtSignal()

    def __init__(
        self,
        attention: AttentionCapability,
        parent: QObject | None = None,
        *,
        interval_ms: int = BLINK_INTERVAL_MS,
        max_toggles: int = MAX_TOGGLES,
    ) -> None:
        super().__init__(parent)
        self._attention = attention
        self._max_toggles = max_toggles
        self._original_title: str | None = None
        self._message = ""
        self._toggles = 0

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._toggle)

    @property
    def is_active(self) -> bool:
        return self._original_title is not None

    @property
    def toggles(self) -> int:
        return self._toggles

    def start(self, message: str) -> bool:
        """Begin blinking.  Returns False when the window already has focus."""
        if self._attention.is_focused():
            return False
        self.stop()

        title = self._attention.title()
        self._attention.request_attention()

        self._original_title = title
        self._message = message
        self._toggles = 0
        self._attention.focus_gained.connect(self.stop)
        self._toggle()
        if self.is_active:
            self._qt_timer.start()
        return True

    def stop(self) -> None:
        """Restore the original title and drop the focus listener."""
        if self._original_title is None:
            return
        original = self._original_title
        self._halt()
        self._attention.set_title(original)
        self.finished.emit()

    def _toggle(self) -> None:
        if self._toggles >= self._max_toggles:
            self.stop()
            return
        try:
            if self._toggles % 2 == 0:
                self._attention.set_title(ATTENTION_PREFIX + self._message)
            else:
                self._attention.set_title(self._original_title or "")
        except Exception:
            logger.exception("Title blink failed, stopping")
            self._halt()
            return
        self._toggles += 1

    def _halt(self) -> None:
        self._qt_timer.stop()
        try:
            self._attention.focus_gained.disconnect(self.stop)
        except TypeError:
            pass
        self._original_title = None
