"""Exercise gate: the forced pause between a work session and its break.

When a work session ends the engine parks in IDLE with nothing armed.
The gate picks an exercise and presents it; only :meth:`acknowledge`
(wired to the dialog's "Done!" button) moves the engine on into the
break.  There is no countdown while the exercise is pending, however
long it takes.
"""

from __future__ import annotations

import logging
from typing import Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from ..timer.engine import PhaseEvent, PhaseEventKind, SessionEngine, TimerSnapshot
from .catalog import Exercise

logger = logging.getLogger(__name__)


FALLBACK_EXERCISE = Exercise(
    id=0,
    name="Stand up and stretch",
    instructions="Stand up, reach for the ceiling, roll your shoulders and take "
                 "a few deep breaths.",
    duration_seconds=60,
)


class ExerciseProvider(Protocol):
    def next_item(self) -> Exercise: ...


class ExerciseGate(QObject):
    """Holds the engine between ``work_completed`` and the break.

    Signals
    -------
    exercise_presented(exercise: Exercise)
        Show this exercise and block until the user confirms.
    dismissed()
        The pending exercise is no longer needed (engine was reset).
    """

    exercise_presented = pyqtSignal(object)
    dismissed = pyqtSignal()

    def __init__(
        self,
        engine: SessionEngine,
        provider: ExerciseProvider,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._provider = provider
        self._pending: Exercise | None = None

        engine.phase_event.connect(self._on_phase_event)
        engine.state_changed.connect(self._on_state_changed)

    @property
    def pending(self) -> Exercise | None:
        return self._pending

    def acknowledge(self) -> bool:
        """The user did the exercise: start the break."""
        if self._pending is None:
            return False
        logger.info("Exercise acknowledged: %s", self._pending.name)
        self._pending = None
        return self._engine.acknowledge_exercise()

    def dispose(self) -> None:
        self._engine.phase_event.disconnect(self._on_phase_event)
        self._engine.state_changed.disconnect(self._on_state_changed)

    def _on_phase_event(self, event: PhaseEvent) -> None:
        if event.kind is not PhaseEventKind.WORK_COMPLETED:
            return
        try:
            exercise = self._provider.next_item()
        except Exception:
            logger.exception("Exercise provider failed, using fallback")
            exercise = FALLBACK_EXERCISE
        self._pending = exercise
        logger.info("Exercise presented: %s", exercise.name)
        self.exercise_presented.emit(exercise)

    def _on_state_changed(self, snapshot: TimerSnapshot) -> None:
        if self._pending is not None and not snapshot.awaiting_exercise:
            logger.info("Pending exercise dismissed")
            self._pending = None
            self.dismissed.emit()
