"""Timer configuration with bounds checking.

``TimerConfig`` is immutable.  Changing a value means building a new
instance with :meth:`TimerConfig.merged`, which validates before it
returns, so a rejected update never leaves a half-applied config behind.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

from ..errors import ValidationError


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_SESSIONS_BEFORE_LONG_BREAK = 4

# field name → (minimum, maximum, human label)
BOUNDS: dict[str, tuple[int, int, str]] = {
    "work_minutes": (1, 120, "Work time"),
    "break_minutes": (1, 60, "Break time"),
    "long_break_minutes": (1, 60, "Long break time"),
    "sessions_before_long_break": (1, 12, "Sessions before long break"),
}


@dataclass(frozen=True)
class TimerConfig:
    """Durations (minutes) and the long-break cadence."""

    work_minutes: int = DEFAULT_WORK_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    sessions_before_long_break: int = DEFAULT_SESSIONS_BEFORE_LONG_BREAK

    def __post_init__(self) -> None:
        for f in fields(self):
            _check(f.name, getattr(self, f.name))

    # ── derived ───────────────────────────────────────────────────────

    @property
    def work_seconds(self) -> int:
        return self.work_minutes * 60

    @property
    def break_seconds(self) -> int:
        return self.break_minutes * 60

    @property
    def long_break_seconds(self) -> int:
        return self.long_break_minutes * 60

    def is_long_break(self, completed_work_sessions: int) -> bool:
        """Whether the break after the given (post-increment) count is long."""
        return completed_work_sessions % self.sessions_before_long_break == 0

    # ── updates ───────────────────────────────────────────────────────

    def merged(self, **changes: int) -> TimerConfig:
        """Return a copy with *changes* applied.

        Raises ``ValidationError`` naming the first bad field.  ``self``
        is never modified.
        """
        for name in changes:
            if name not in BOUNDS:
                raise ValidationError(
                    name, changes[name], f"Unknown configuration field: {name}"
                )
        return replace(self, **changes)

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _check(name: str, value: object) -> None:
    low, high, label = BOUNDS[name]
    # bool is an int subclass; True minutes is never what the caller meant
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            name, value, f"{label} must be a whole number ({name}={value!r})"
        )
    if not low <= value <= high:
        raise ValidationError(
            name, value, f"{label} must be between {low} and {high} ({name}={value})"
        )
