"""Countdown driver: polls the engine's derived remaining time.

The driver never counts anything down itself.  Each poll asks the engine
for ``armed_duration - (now - anchor)``, so a poll that arrives late
(window hidden, laptop asleep, event loop blocked) still sees the right
value and fires an overdue phase transition straight away.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, QTimer

if TYPE_CHECKING:
    from .engine import SessionEngine


POLL_INTERVAL_MS = 100  # finer than the 1 s display so the UI feels responsive


class CountdownDriver(QObject):
    """Owns the poll ``QTimer`` for one :class:`SessionEngine`.

    Only one poll is ever active: :meth:`arm` stops the running timer
    before starting it again.
    """

    def __init__(
        self,
        engine: SessionEngine,
        parent: QObject | None = None,
        *,
        interval_ms: int = POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._last_emitted: int | None = None

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self.poll)

    @property
    def is_armed(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._qt_timer.interval()

    def arm(self) -> None:
        self._qt_timer.stop()
        self._last_emitted = None
        self._qt_timer.start()

    def disarm(self) -> None:
        self._qt_timer.stop()

    def dispose(self) -> None:
        self.disarm()
        self._qt_timer.timeout.disconnect(self.poll)

    def poll(self) -> None:
        """Recompute remaining time; finish the phase once it hits zero."""
        engine = self._engine
        if not engine.is_running:
            self.disarm()
            return

        remaining = engine.remaining_exact()
        whole = math.ceil(remaining)
        if whole != self._last_emitted:
            self._last_emitted = whole
            engine.tick.emit(whole)

        if remaining <= 0:
            self.disarm()
            engine.finish_phase()
