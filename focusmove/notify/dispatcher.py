"""Fan-out of phase events to the notification channels.

Channels, always tried in this order
------------------------------------
1. audio                 gated by ``audio_enabled``
2. system_notification   gated by ``notifications_enabled``
3. banner                always; the in-app fallback that cannot fail
4. attention             only while the window is unfocused

A channel that raises is reported as a :class:`ChannelFailure` (logged
and emitted on ``channel_failed``) and the next channel still runs.
Nothing raised here reaches the engine.

Permission flags start out False and only flip to True after an awaited
grant: a trial playback for audio, a granted permission state for system
notifications.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from ..errors import ChannelFailure, PermissionDeniedError
from ..timer.engine import PhaseEvent, SessionEngine
from .attention import TitleBlinker
from .capabilities import (
    AttentionCapability,
    AudioCapability,
    NotificationCapability,
    PermissionState,
)
from .events import Notification, build_notification

logger = logging.getLogger(__name__)


CHANNELS = ("audio", "system_notification", "banner", "attention")


class NotificationDispatcher(QObject):
    """Delivers every ``SessionEngine.phase_event`` to all channels.

    Signals
    -------
    banner(notification: Notification)
        The in-app banner channel; the UI renders it.
    channel_failed(failure: ChannelFailure)
        A channel raised while delivering an event.
    permissions_changed()
        ``audio_enabled`` or ``notifications_enabled`` changed.
    """

    banner = pyqtSignal(object)
    channel_failed = pyqtSignal(object)
    permissions_changed = pyqtSignal()

    def __init__(
        self,
        engine: SessionEngine,
        parent: QObject | None = None,
        *,
        audio: AudioCapability | None = None,
        notifier: NotificationCapability | None = None,
        attention: AttentionCapability | None = None,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._audio = audio
        self._notifier = notifier
        self._blinker = TitleBlinker(attention, self) if attention is not None else None

        self._audio_enabled = False
        self._notifications_enabled = False
        self._notification_prompted = False

        engine.phase_event.connect(self.dispatch)

    # ── state ─────────────────────────────────────────────────────────

    @property
    def audio_enabled(self) -> bool:
        return self._audio_enabled

    @property
    def notifications_enabled(self) -> bool:
        return self._notifications_enabled

    @property
    def notification_prompted(self) -> bool:
        return self._notification_prompted

    @property
    def blinker(self) -> TitleBlinker | None:
        return self._blinker

    # ── fan-out ───────────────────────────────────────────────────────

    def dispatch(self, event: PhaseEvent) -> tuple[str, ...]:
        """Send *event* through every channel; return the ones that delivered."""
        notification = build_notification(event)
        channels: tuple[tuple[str, Callable[[Notification], bool]], ...] = (
            ("audio", self._send_audio),
            ("system_notification", self._send_system_notification),
            ("banner", self._send_banner),
            ("attention", self._send_attention),
        )

        delivered: list[str] = []
        for name, send in channels:
            try:
                if send(notification):
                    delivered.append(name)
            except Exception as exc:
                failure = ChannelFailure(
                    name, event, f"{name} channel failed for {event.kind.value}: {exc}"
                )
                failure.__cause__ = exc
                logger.warning("%s", failure, exc_info=exc)
                self.channel_failed.emit(failure)

        logger.debug("Dispatched %s via %s", event.kind.value, ", ".join(delivered))
        return tuple(delivered)

    def _send_audio(self, notification: Notification) -> bool:
        if not self._audio_enabled or self._audio is None:
            return False
        self._audio.play(notification.cue)
        return True

    def _send_system_notification(self, notification: Notification) -> bool:
        if not self._notifications_enabled or self._notifier is None:
            return False
        self._notifier.show(notification.title, notification.body)
        return True

    def _send_banner(self, notification: Notification) -> bool:
        self.banner.emit(notification)
        return True

    def _send_attention(self, notification: Notification) -> bool:
        if self._blinker is None:
            return False
        return self._blinker.start(notification.title)

    # ── permissions ───────────────────────────────────────────────────

    async def toggle_audio(self) -> bool:
        """Turn sound off, or on after a successful trial playback.

        Returns the new ``audio_enabled`` value.  Raises
        ``PermissionDeniedError`` when the trial fails; the flag stays
        False in that case and when the trial is cancelled.
        """
        if self._audio_enabled:
            self._set_audio(False)
            return False
        if self._audio is None:
            raise PermissionDeniedError("audio", "No audio output is available.")

        try:
            played = await self._audio.request_audio()
        except Exception as exc:
            logger.exception("Audio trial playback raised")
            raise PermissionDeniedError(
                "audio", "Sound could not be played. Check your audio output."
            ) from exc
        if not played:
            raise PermissionDeniedError(
                "audio", "Sound could not be played. Check your audio output."
            )

        self._set_audio(True)
        return True

    async def request_notification_permission(self) -> bool:
        """Ask for notification permission, at most once.

        Already granted → enabled.  Previously denied → stays disabled
        without prompting or raising.  Not yet requested → prompt; a
        refusal raises ``PermissionDeniedError``.  Later calls just return
        the current flag.
        """
        if self._notification_prompted or self._notifier is None:
            return self._notifications_enabled
        self._notification_prompted = True

        state = self._notifier.permission_state()
        if state is PermissionState.GRANTED:
            self._set_notifications(True)
            return True
        if state is PermissionState.DENIED:
            logger.info("System notifications denied, using in-app banners only")
            return False

        try:
            result = await self._notifier.request_permission()
        except asyncio.CancelledError:
            self._notification_prompted = False
            raise
        except Exception as exc:
            logger.exception("Notification permission request raised")
            raise PermissionDeniedError(
                "notifications", "System notifications could not be enabled."
            ) from exc

        if result is not PermissionState.GRANTED:
            raise PermissionDeniedError(
                "notifications",
                "System notifications were not allowed. In-app banners will still show.",
            )
        self._set_notifications(True)
        return True

    async def toggle_notifications(self) -> bool:
        """Turn system notifications off, or back on if permission allows.

        Never re-prompts after a denial.
        """
        if self._notifications_enabled:
            self._set_notifications(False)
            return False
        if self._notifier is None:
            raise PermissionDeniedError(
                "notifications", "System notifications are not available."
            )
        if not self._notification_prompted:
            return await self.request_notification_permission()
        if self._notifier.permission_state() is PermissionState.GRANTED:
            self._set_notifications(True)
            return True
        raise PermissionDeniedError(
            "notifications",
            "System notifications are blocked. Allow them in your system settings.",
        )

    def dispose(self) -> None:
        if self._blinker is not None:
            self._blinker.stop()
        self._engine.phase_event.disconnect(self.dispatch)

    def _set_audio(self, enabled: bool) -> None:
        self._audio_enabled = enabled
        logger.info("Audio %s", "enabled" if enabled else "disabled")
        self.permissions_changed.emit()

    def _set_notifications(self, enabled: bool) -> None:
        self._notifications_enabled = enabled
        logger.info("System notifications %s", "enabled" if enabled else "disabled")
        self.permissions_changed.emit()
