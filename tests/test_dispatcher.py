"""Tests for the notification dispatcher.

Covers: channel order, permission gating, failure isolation, the audio
trial toggle, the one-time notification permission request, and the
notifications toggle.
"""

import asyncio

import pytest

from focusmove.errors import ChannelFailure, PermissionDeniedError
from focusmove.notify.capabilities import PermissionState
from focusmove.notify.dispatcher import CHANNELS, NotificationDispatcher
from focusmove.notify.events import Notification
from focusmove.timer.engine import Phase, PhaseEvent, PhaseEventKind

from helpers import FakeAttention, FakeAudio, FakeNotifier, SignalCollector


@pytest.fixture
def calls():
    return []


@pytest.fixture
def audio(calls):
    return FakeAudio(calls=calls)


@pytest.fixture
def notifier(calls):
    return FakeNotifier(PermissionState.GRANTED, calls=calls)


@pytest.fixture
def attention(qapp, calls):
    return FakeAttention(calls=calls)


@pytest.fixture
def dispatcher(engine, audio, notifier, attention, calls):
    d = NotificationDispatcher(engine, audio=audio, notifier=notifier, attention=attention)
    d.banner.connect(lambda n: calls.append("banner"))
    yield d
    d.blinker.stop()


def enable_all(dispatcher):
    asyncio.run(dispatcher.toggle_audio())
    asyncio.run(dispatcher.request_notification_permission())


# ═══════════════════════════════════════════════════════════════════════════
#  FAN-OUT
# ═══════════════════════════════════════════════════════════════════════════


class TestFanOut:

    def test_channel_order_constant(self):
        assert CHANNELS == ("audio", "system_notification", "banner", "attention")

    def test_all_channels_in_order(self, engine, dispatcher, calls):
        enable_all(dispatcher)

        engine.start()

        assert calls == ["audio", "system_notification", "banner", "attention"]

    def test_dispatch_returns_delivered_channels(self, dispatcher, attention):
        event = PhaseEvent(PhaseEventKind.WORK_COMPLETED, Phase.WORKING, 1, 1)
        assert dispatcher.dispatch(event) == ("banner", "attention")

        enable_all(dispatcher)
        attention.focused = True
        assert dispatcher.dispatch(event) == ("audio", "system_notification", "banner")

    def test_banner_carries_notification(self, engine, dispatcher):
        banners = SignalCollector()
        dispatcher.banner.connect(banners)
        engine.start()
        engine.skip()
        assert isinstance(banners.last, Notification)
        assert banners.last.event.kind is PhaseEventKind.WORK_COMPLETED
        assert banners.last.cue == "work_complete"

    def test_disabled_channels_are_skipped(self, engine, dispatcher, calls):
        engine.start()
        assert calls == ["banner", "attention"]

    def test_banner_always_fires(self, qapp, engine, calls):
        d = NotificationDispatcher(engine)
        d.banner.connect(lambda n: calls.append(n.event.kind))
        engine.start()
        engine.skip()
        assert calls == [PhaseEventKind.WORK_STARTED, PhaseEventKind.WORK_COMPLETED]

    def test_focused_window_skips_attention(self, engine, dispatcher, attention, calls):
        attention.focused = True
        engine.start()
        assert calls == ["banner"]
        assert attention.alerts == 0

    def test_audio_plays_matching_cue(self, engine, dispatcher, audio):
        enable_all(dispatcher)
        engine.start()
        engine.skip()
        engine.acknowledge_exercise()
        engine.skip()
        assert audio.played == [
            "work_start", "work_complete", "break_start",
            "break_complete", "work_start",
        ]

    def test_system_notification_text(self, engine, dispatcher, notifier):
        enable_all(dispatcher)
        engine.start()
        engine.skip()
        titles = [title for title, _ in notifier.shown]
        assert titles == ["Focus time", "Work session complete"]


class TestFailureIsolation:

    def test_audio_failure_does_not_stop_later_channels(
        self, engine, dispatcher, audio, calls,
    ):
        enable_all(dispatcher)
        failures = SignalCollector()
        dispatcher.channel_failed.connect(failures)
        audio.play_error = RuntimeError("device gone")

        engine.start()

        assert calls == ["system_notification", "banner", "attention"]
        assert len(failures) == 1
        failure = failures.last
        assert isinstance(failure, ChannelFailure)
        assert failure.channel == "audio"
        assert failure.event.kind is PhaseEventKind.WORK_STARTED
        assert isinstance(failure.__cause__, RuntimeError)

    def test_notification_failure_isolated(self, engine, dispatcher, notifier, calls):
        enable_all(dispatcher)
        notifier.show_error = OSError("no daemon")
        failures = SignalCollector()
        dispatcher.channel_failed.connect(failures)

        engine.start()

        assert calls == ["audio", "banner", "attention"]
        assert failures.last.channel == "system_notification"

    def test_failure_never_reaches_engine(self, engine, dispatcher, audio, notifier):
        enable_all(dispatcher)
        audio.play_error = RuntimeError("x")
        notifier.show_error = RuntimeError("y")

        engine.start()
        engine.skip()

        assert engine.awaiting_exercise

    def test_failure_does_not_disable_channel(self, engine, dispatcher, audio):
        enable_all(dispatcher)
        audio.play_error = RuntimeError("once")
        engine.start()
        audio.play_error = None
        engine.skip()
        assert dispatcher.audio_enabled
        assert audio.played == ["work_complete"]


# ═══════════════════════════════════════════════════════════════════════════
#  AUDIO TOGGLE
# ═══════════════════════════════════════════════════════════════════════════


class TestToggleAudio:

    def test_starts_disabled(self, dispatcher):
        assert dispatcher.audio_enabled is False

    def test_successful_trial_enables(self, dispatcher, audio):
        changed = SignalCollector()
        dispatcher.permissions_changed.connect(changed)

        assert asyncio.run(dispatcher.toggle_audio()) is True

        assert dispatcher.audio_enabled
        assert audio.trials == 1
        assert len(changed) == 1

    def test_toggle_off_needs_no_trial(self, dispatcher, audio):
        asyncio.run(dispatcher.toggle_audio())
        assert asyncio.run(dispatcher.toggle_audio()) is False
        assert not dispatcher.audio_enabled
        assert audio.trials == 1

    def test_failed_trial_raises_and_stays_off(self, dispatcher, audio):
        audio.grant = False
        with pytest.raises(PermissionDeniedError) as info:
            asyncio.run(dispatcher.toggle_audio())
        assert info.value.capability == "audio"
        assert not dispatcher.audio_enabled

    def test_raising_trial_is_wrapped(self, dispatcher, audio):
        audio.trial_error = RuntimeError("blocked by policy")
        with pytest.raises(PermissionDeniedError) as info:
            asyncio.run(dispatcher.toggle_audio())
        assert isinstance(info.value.__cause__, RuntimeError)
        assert not dispatcher.audio_enabled

    def test_cancelled_trial_leaves_flag_false(self, dispatcher, audio):
        audio.block = True

        async def scenario():
            task = asyncio.create_task(dispatcher.toggle_audio())
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
        assert not dispatcher.audio_enabled

    def test_no_audio_capability(self, qapp, engine):
        d = NotificationDispatcher(engine)
        with pytest.raises(PermissionDeniedError):
            asyncio.run(d.toggle_audio())


# ═══════════════════════════════════════════════════════════════════════════
#  NOTIFICATION PERMISSION
# ═══════════════════════════════════════════════════════════════════════════


class TestNotificationPermission:

    def test_already_granted_enables_without_prompt(self, dispatcher, notifier):
        assert asyncio.run(dispatcher.request_notification_permission()) is True
        assert dispatcher.notifications_enabled
        assert notifier.prompts == 0

    def test_previously_denied_is_silent(self, dispatcher, notifier):
        notifier.state = PermissionState.DENIED
        assert asyncio.run(dispatcher.request_notification_permission()) is False
        assert not dispatcher.notifications_enabled
        assert notifier.prompts == 0

    def test_prompt_granted(self, dispatcher, notifier):
        notifier.state = PermissionState.NOT_REQUESTED
        assert asyncio.run(dispatcher.request_notification_permission()) is True
        assert notifier.prompts == 1
        assert dispatcher.notifications_enabled

    def test_prompt_refused_raises(self, dispatcher, notifier):
        notifier.state = PermissionState.NOT_REQUESTED
        notifier.answer = PermissionState.DENIED
        with pytest.raises(PermissionDeniedError):
            asyncio.run(dispatcher.request_notification_permission())
        assert not dispatcher.notifications_enabled

    def test_prompts_at_most_once(self, dispatcher, notifier):
        notifier.state = PermissionState.NOT_REQUESTED
        notifier.answer = PermissionState.DENIED
        with pytest.raises(PermissionDeniedError):
            asyncio.run(dispatcher.request_notification_permission())

        assert asyncio.run(dispatcher.request_notification_permission()) is False
        assert notifier.prompts == 1
        assert dispatcher.notification_prompted

    def test_cancelled_prompt_can_be_retried(self, qapp, engine):
        class SlowNotifier(FakeNotifier):
            async def request_permission(self):
                self.prompts += 1
                await asyncio.Event().wait()

        notifier = SlowNotifier()
        d = NotificationDispatcher(engine, notifier=notifier)

        async def scenario():
            task = asyncio.create_task(d.request_notification_permission())
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
        assert not d.notification_prompted
        assert not d.notifications_enabled


class TestToggleNotifications:

    def test_first_toggle_requests_permission(self, dispatcher, notifier):
        notifier.state = PermissionState.NOT_REQUESTED
        assert asyncio.run(dispatcher.toggle_notifications()) is True
        assert notifier.prompts == 1

    def test_toggle_off_and_back_on(self, dispatcher, notifier):
        asyncio.run(dispatcher.request_notification_permission())
        assert asyncio.run(dispatcher.toggle_notifications()) is False
        assert asyncio.run(dispatcher.toggle_notifications()) is True
        assert notifier.prompts == 0

    def test_denied_never_reprompts(self, dispatcher, notifier):
        notifier.state = PermissionState.DENIED
        asyncio.run(dispatcher.request_notification_permission())
        with pytest.raises(PermissionDeniedError) as info:
            asyncio.run(dispatcher.toggle_notifications())
        assert info.value.capability == "notifications"
        assert notifier.prompts == 0

    def test_no_notifier(self, qapp, engine):
        d = NotificationDispatcher(engine)
        with pytest.raises(PermissionDeniedError):
            asyncio.run(d.toggle_notifications())


class TestDispose:

    def test_dispose_disconnects(self, engine, dispatcher, calls):
        dispatcher.dispose()
        engine.start()
        assert calls == []

    def test_dispose_restores_title(self, engine, dispatcher, attention):
        engine.start()
        assert dispatcher.blinker.is_active
        dispatcher.dispose()
        assert attention.title() == "FocusMove"
        assert not dispatcher.blinker.is_active
