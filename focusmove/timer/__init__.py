"""Timer package."""

from .clock import Clock, SystemClock
from .config import TimerConfig, BOUNDS
from .driver import CountdownDriver, POLL_INTERVAL_MS
from .engine import (
    SessionEngine,
    Phase,
    PhaseEvent,
    PhaseEventKind,
    TimerSnapshot,
    format_time,
)

__all__ = [
    "Clock",
    "SystemClock",
    "TimerConfig",
    "BOUNDS",
    "CountdownDriver",
    "POLL_INTERVAL_MS",
    "SessionEngine",
    "Phase",
    "PhaseEvent",
    "PhaseEventKind",
    "TimerSnapshot",
    "format_time",
]
