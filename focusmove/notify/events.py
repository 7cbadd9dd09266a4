"""What each phase event says and sounds like."""

from __future__ import annotations

from dataclasses import dataclass

from ..timer.engine import Phase, PhaseEvent, PhaseEventKind


@dataclass(frozen=True)
class Notification:
    """One rendered message, shared by every channel of a fan-out."""

    event: PhaseEvent
    title: str
    body: str
    cue: str


CUES: dict[PhaseEventKind, str] = {
    PhaseEventKind.WORK_STARTED: "work_start",
    PhaseEventKind.WORK_COMPLETED: "work_complete",
    PhaseEventKind.BREAK_STARTED: "break_start",
    PhaseEventKind.BREAK_COMPLETED: "break_complete",
}


def build_notification(event: PhaseEvent) -> Notification:
    kind = event.kind
    if kind is PhaseEventKind.WORK_STARTED:
        title = "Focus time"
        body = f"Session {event.session_index} started. Stay with it."
    elif kind is PhaseEventKind.WORK_COMPLETED:
        title = "Work session complete"
        body = "Time for a quick mobility exercise before your break."
    elif kind is PhaseEventKind.BREAK_STARTED:
        label = "Long break" if event.phase is Phase.LONG_BREAK else "Short break"
        title = f"{label} started"
        body = "Step away from the screen for a bit."
    else:
        title = "Break over"
        body = "Ready for the next round?"
    return Notification(event=event, title=title, body=body, cue=CUES[kind])
