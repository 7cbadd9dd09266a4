"""Clock source for the countdown.

Wall-clock time (``time.time``) is used instead of ``time.monotonic``:
the monotonic clock stops while the machine sleeps on Linux, and time
spent asleep has to count against a running work session.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """Current time in seconds."""
        ...


class SystemClock:
    """Reads the system wall clock.  Holds no state."""

    def now(self) -> float:
        return time.time()
