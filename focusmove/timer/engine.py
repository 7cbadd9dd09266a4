"""Session state machine for FocusMove.

Phases
------
IDLE          Not counting.  Initial state, target of ``reset()``, and the
              zeroed state a finished work session parks in until the
              mobility exercise is acknowledged.
WORKING       Work countdown armed.
SHORT_BREAK   Short break countdown armed.
LONG_BREAK    Long break countdown armed.

Pausing is orthogonal to the phase: a paused engine keeps its phase and
only drops the run flag.

Transitions
-----------
IDLE → WORKING                                 (start)
WORKING → IDLE, awaiting exercise              (countdown exhausted / skip)
IDLE, awaiting exercise → SHORT/LONG_BREAK     (acknowledge_exercise)
SHORT/LONG_BREAK → WORKING                     (countdown exhausted / skip)
running ⇄ paused                               (pause / start, resume)
Any → IDLE                                     (reset / update_config)

Timing
------
Remaining time is never decremented.  Arming stores an ``anchor`` clock
reading and an ``armed_duration``; remaining time is always
``max(0, armed_duration - (now - anchor))``.  Pausing folds the elapsed
time into ``armed_duration`` and clears the anchor, resuming sets a new
anchor.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

from .clock import Clock, SystemClock
from .config import TimerConfig
from .driver import CountdownDriver, POLL_INTERVAL_MS

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    IDLE = "idle"
    WORKING = "working"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self in (Phase.SHORT_BREAK, Phase.LONG_BREAK)


class PhaseEventKind(Enum):
    WORK_STARTED = "work_started"
    WORK_COMPLETED = "work_completed"
    BREAK_STARTED = "break_started"
    BREAK_COMPLETED = "break_completed"


# ── value objects ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PhaseEvent:
    """Payload of ``SessionEngine.phase_event``.

    ``phase`` is the phase the event is about: the work/break that just
    started, or the one that just ended.
    """

    kind: PhaseEventKind
    phase: Phase
    session_index: int
    completed_work_sessions: int

    @property
    def is_long_break(self) -> bool:
        return self.phase is Phase.LONG_BREAK


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the engine, carried by ``state_changed``."""

    phase: Phase
    remaining_seconds: int
    total_seconds: int
    current_session_index: int
    completed_work_sessions: int
    is_running: bool
    awaiting_exercise: bool

    @property
    def formatted_time(self) -> str:
        return format_time(self.remaining_seconds)

    @property
    def progress_percent(self) -> float:
        return progress_percent(self.remaining_seconds, self.total_seconds)

    @property
    def is_paused(self) -> bool:
        return self.phase is not Phase.IDLE and not self.is_running


def format_time(seconds: int) -> str:
    """``MM:SS``; minutes are not wrapped at 60."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def progress_percent(remaining: float, total: int) -> float:
    """0 → 100 progress through a phase of *total* seconds."""
    if total <= 0:
        return 0.0
    elapsed = total - remaining
    return max(0.0, min(100.0, elapsed / total * 100.0))


# ── engine ────────────────────────────────────────────────────────────────


class SessionEngine(QObject):
    """Pomodoro state machine with anchor-based timing.

    One instance per running application.  The countdown driver is a
    child of the engine; the notification dispatcher and exercise gate
    connect to its signals.

    Signals
    -------
    state_changed(snapshot: TimerSnapshot)
        Emitted after every transition or command that changed state.
    tick(remaining_seconds: int)
        Emitted by the driver whenever the displayed second changes.
    phase_event(event: PhaseEvent)
        ``work_started``, ``work_completed``, ``break_started``,
        ``break_completed``.  Always emitted after ``state_changed`` so
        listeners see the settled state.
    config_changed(config: TimerConfig)
        Emitted when a new configuration has been accepted.
    """

    state_changed = pyqtSignal(object)
    tick = pyqtSignal(int)
    phase_event = pyqtSignal(object)
    config_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        config: TimerConfig | None = None,
        clock: Clock | None = None,
        poll_interval_ms: int = POLL_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)

        # ── configuration ─────────────────────────────────────────────
        self._config: TimerConfig = config or TimerConfig()
        self._clock: Clock = clock or SystemClock()

        # ── cycle / session state ─────────────────────────────────────
        self._phase: Phase = Phase.IDLE
        self._running: bool = False
        self._awaiting_exercise: bool = False
        self._session_index: int = 1
        self._completed_work: int = 0

        # ── timing state ──────────────────────────────────────────────
        self._anchor: float | None = None  # None while paused or idle
        self._armed_duration: float = 0.0
        self._total_seconds: int = 0

        self._driver = CountdownDriver(self, self, interval_ms=poll_interval_ms)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def driver(self) -> CountdownDriver:
        return self._driver

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        """True exactly while a countdown is armed and not paused."""
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._phase is not Phase.IDLE and not self._running

    @property
    def awaiting_exercise(self) -> bool:
        """Work finished, break not armed yet: waiting on acknowledgment."""
        return self._awaiting_exercise

    @property
    def current_session_index(self) -> int:
        return self._session_index

    @property
    def completed_work_sessions(self) -> int:
        return self._completed_work

    @property
    def total_seconds(self) -> int:
        """Full length of the current phase (0 when idle)."""
        return self._total_seconds

    @property
    def remaining_seconds(self) -> int:
        """Whole seconds left, rounded up."""
        return math.ceil(self.remaining_exact())

    @property
    def formatted_time(self) -> str:
        return format_time(self.remaining_seconds)

    @property
    def progress_percent(self) -> float:
        return progress_percent(self.remaining_seconds, self._total_seconds)

    def remaining_exact(self) -> float:
        """Seconds left as a float, derived from anchor + armed duration."""
        if self._anchor is None:
            return max(0.0, self._armed_duration)
        elapsed = max(0.0, self._clock.now() - self._anchor)
        return max(0.0, self._armed_duration - elapsed)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            remaining_seconds=self.remaining_seconds,
            total_seconds=self._total_seconds,
            current_session_index=self._session_index,
            completed_work_sessions=self._completed_work,
            is_running=self._running,
            awaiting_exercise=self._awaiting_exercise,
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start a work session from IDLE, or resume a paused phase.

        No-op while running and while waiting for the exercise to be
        acknowledged.
        """
        if self._running:
            return
        if self._awaiting_exercise:
            logger.info("Start ignored: waiting for exercise acknowledgment")
            return

        if self._phase is Phase.IDLE:
            self._arm(Phase.WORKING, self._config.work_seconds)
            logger.info(
                "Work started: session=%s duration=%ss",
                self._session_index,
                self._total_seconds,
            )
            self._emit_state()
            self._emit_event(PhaseEventKind.WORK_STARTED, Phase.WORKING)
            return

        # paused → running: new anchor, frozen remaining is the new armed duration
        self._anchor = self._clock.now()
        self._running = True
        self._driver.arm()
        logger.info(
            "Resumed: phase=%s remaining=%ss",
            self._phase.value,
            self.remaining_seconds,
        )
        self._emit_state()

    def resume(self) -> None:
        """Resume a paused phase.  Unlike :meth:`start`, never starts from IDLE."""
        if self.is_paused:
            self.start()

    def pause(self) -> None:
        if not self._running:
            return
        self._armed_duration = self.remaining_exact()
        self._anchor = None
        self._running = False
        self._driver.disarm()
        logger.info(
            "Paused: phase=%s remaining=%ss",
            self._phase.value,
            self.remaining_seconds,
        )
        self._emit_state()

    def reset(self) -> None:
        """Back to IDLE with nothing armed.

        ``completed_work_sessions`` survives resets; the session index
        starts over at 1.
        """
        self._driver.disarm()
        self._phase = Phase.IDLE
        self._running = False
        self._awaiting_exercise = False
        self._session_index = 1
        self._anchor = None
        self._armed_duration = 0.0
        self._total_seconds = 0
        logger.info("Reset: completed_work_sessions=%s", self._completed_work)
        self._emit_state()

    def skip(self) -> None:
        """Finish the current phase now, running or paused.

        No-op while idle, including while the exercise is pending: the
        mobility break cannot be skipped past.
        """
        if self._phase is Phase.IDLE:
            return
        logger.info("Skipped: phase=%s", self._phase.value)
        self.finish_phase()

    def acknowledge_exercise(self) -> bool:
        """Arm the break after the exercise was done.

        Returns False (and does nothing) unless a finished work session is
        waiting for acknowledgment.
        """
        if not self._awaiting_exercise:
            return False
        self._awaiting_exercise = False

        if self._config.is_long_break(self._completed_work):
            self._arm(Phase.LONG_BREAK, self._config.long_break_seconds)
        else:
            self._arm(Phase.SHORT_BREAK, self._config.break_seconds)

        logger.info(
            "Break started: phase=%s duration=%ss completed_work_sessions=%s",
            self._phase.value,
            self._total_seconds,
            self._completed_work,
        )
        self._emit_state()
        self._emit_event(PhaseEventKind.BREAK_STARTED, self._phase)
        return True

    def update_config(self, **changes: int) -> TimerConfig:
        """Merge *changes* into the configuration and reset.

        Raises ``ValidationError`` for an unknown or out-of-range field;
        in that case neither the configuration nor the session changes.
        Running timing state is discarded, not rescaled.
        """
        new_config = self._config.merged(**changes)
        self._apply_config(new_config)
        return new_config

    def set_config(self, config: TimerConfig) -> None:
        """Replace the configuration wholesale and reset."""
        self._apply_config(config)

    def finish_phase(self) -> None:
        """Exhausted transition for the current phase.

        Called by the driver once remaining time reaches zero, and by
        :meth:`skip`.
        """
        self._driver.disarm()

        if self._phase is Phase.WORKING:
            self._completed_work += 1
            self._phase = Phase.IDLE
            self._running = False
            self._awaiting_exercise = True
            self._anchor = None
            self._armed_duration = 0.0
            self._total_seconds = 0
            logger.info(
                "Work completed: session=%s completed_work_sessions=%s",
                self._session_index,
                self._completed_work,
            )
            self._emit_state()
            self._emit_event(PhaseEventKind.WORK_COMPLETED, Phase.WORKING)
            return

        if self._phase.is_break:
            ended = self._phase
            self._session_index += 1
            self._arm(Phase.WORKING, self._config.work_seconds)
            logger.info(
                "Break completed: phase=%s next_session=%s",
                ended.value,
                self._session_index,
            )
            self._emit_state()
            self._emit_event(PhaseEventKind.BREAK_COMPLETED, ended)
            self._emit_event(PhaseEventKind.WORK_STARTED, Phase.WORKING)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _arm(self, phase: Phase, seconds: int) -> None:
        self._phase = phase
        self._total_seconds = seconds
        self._armed_duration = float(seconds)
        self._anchor = self._clock.now()
        self._running = True
        self._driver.arm()

    def _apply_config(self, config: TimerConfig) -> None:
        self._config = config
        logger.info("Configuration updated: %s", config.as_dict())
        self.config_changed.emit(config)
        self.reset()

    def _emit_state(self) -> None:
        self.state_changed.emit(self.snapshot())

    def _emit_event(self, kind: PhaseEventKind, phase: Phase) -> None:
        self.phase_event.emit(
            PhaseEvent(
                kind=kind,
                phase=phase,
                session_index=self._session_index,
                completed_work_sessions=self._completed_work,
            )
        )
