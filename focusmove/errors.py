"""Exception types shared across FocusMove.

Hierarchy
---------
FocusMoveError
├── ValidationError        bad configuration value, state untouched
├── PermissionDeniedError  audio trial or notification request refused
└── ChannelFailure         one notification channel blew up (contained)
"""

from __future__ import annotations


class FocusMoveError(Exception):
    """Base class for every error raised by FocusMove itself."""


class ValidationError(FocusMoveError, ValueError):
    """A configuration field is out of range or of the wrong type."""

    def __init__(self, field: str, value: object, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class PermissionDeniedError(FocusMoveError):
    """A capability could not be enabled.  Non-fatal, shown to the user."""

    def __init__(self, capability: str, message: str) -> None:
        super().__init__(message)
        self.capability = capability


class ChannelFailure(FocusMoveError):
    """A single notification channel raised while delivering an event.

    Never propagated to the timer.  The original exception is kept as
    ``__cause__``.
    """

    def __init__(self, channel: str, event: object, message: str) -> None:
        super().__init__(message)
        self.channel = channel
        self.event = event
