"""Shared test helpers for FocusMove."""

import asyncio

from focusmove.notify.capabilities import AttentionCapability, PermissionState
from focusmove.timer.engine import SessionEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: float = 1_000_000.0):
        self.value = start

    def now(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


def run_for(engine: SessionEngine, clock: FakeClock, seconds: float) -> None:
    """Let *seconds* pass, then deliver a single driver poll."""
    clock.advance(seconds)
    engine.driver.poll()


def finish_current(engine: SessionEngine, clock: FakeClock) -> None:
    """Let the armed countdown run out and poll once."""
    run_for(engine, clock, engine.remaining_exact())


# ── fake capabilities ─────────────────────────────────────────────────────


class FakeAudio:
    def __init__(self, *, grant: bool = True, calls: list | None = None):
        self.grant = grant
        self.calls = calls if calls is not None else []
        self.played: list[str] = []
        self.trials = 0
        self.play_error: Exception | None = None
        self.trial_error: Exception | None = None
        self.block = False

    async def request_audio(self) -> bool:
        self.trials += 1
        if self.block:
            await asyncio.Event().wait()
        if self.trial_error is not None:
            raise self.trial_error
        return self.grant

    def play(self, cue: str) -> None:
        if self.play_error is not None:
            raise self.play_error
        self.calls.append("audio")
        self.played.append(cue)


class FakeNotifier:
    def __init__(
        self,
        state: PermissionState = PermissionState.NOT_REQUESTED,
        *,
        answer: PermissionState = PermissionState.GRANTED,
        calls: list | None = None,
    ):
        self.state = state
        self.answer = answer
        self.calls = calls if calls is not None else []
        self.prompts = 0
        self.shown: list[tuple[str, str]] = []
        self.show_error: Exception | None = None

    def permission_state(self) -> PermissionState:
        return self.state

    async def request_permission(self) -> PermissionState:
        self.prompts += 1
        self.state = self.answer
        return self.answer

    def show(self, title: str, body: str) -> None:
        if self.show_error is not None:
            raise self.show_error
        self.calls.append("system_notification")
        self.shown.append((title, body))


class FakeAttention(AttentionCapability):
    def __init__(self, *, focused: bool = False, calls: list | None = None):
        super().__init__()
        self.focused = focused
        self.calls = calls if calls is not None else []
        self.titles: list[str] = []
        self.alerts = 0
        self._title = "FocusMove"

    def is_focused(self) -> bool:
        return self.focused

    def title(self) -> str:
        return self._title

    def set_title(self, text: str) -> None:
        if not self.titles:
            self.calls.append("attention")
        self._title = text
        self.titles.append(text)

    def request_attention(self) -> None:
        self.alerts += 1
