"""Platform capabilities the notification dispatcher talks to.

The dispatcher only sees these small interfaces, so its gating logic can
be exercised with fakes.  The Qt-backed implementations live at the
bottom of the module.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Protocol

from PyQt6.QtCore import QCoreApplication, QObject, Qt, pyqtSignal
from PyQt6.QtMultimedia import QSoundEffect
from PyQt6.QtWidgets import QApplication, QSystemTrayIcon, QWidget

from ..audio.sounds import SoundManager


class PermissionState(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    NOT_REQUESTED = "not_requested"


# ── interfaces ────────────────────────────────────────────────────────────


class AudioCapability(Protocol):
    async def request_audio(self) -> bool:
        """Play a trial cue; True only if it actually played."""
        ...

    def play(self, cue: str) -> None: ...


class NotificationCapability(Protocol):
    def permission_state(self) -> PermissionState: ...

    async def request_permission(self) -> PermissionState: ...

    def show(self, title: str, body: str) -> None: ...


class AttentionCapability(QObject):
    """The window whose title blinks.  Emits ``focus_gained`` on refocus."""

    focus_gained = pyqtSignal()

    def is_focused(self) -> bool:
        raise NotImplementedError

    def title(self) -> str:
        raise NotImplementedError

    def set_title(self, text: str) -> None:
        raise NotImplementedError

    def request_attention(self) -> None:
        raise NotImplementedError


# ── Qt implementations ────────────────────────────────────────────────────


TRIAL_CUE = "work_start"
TRIAL_TIMEOUT_S = 3.0
_PUMP_INTERVAL_S = 0.05


class QtAudio:
    """Audio channel backed by :class:`SoundManager`."""

    def __init__(self, sounds: SoundManager, *, timeout: float = TRIAL_TIMEOUT_S) -> None:
        self._sounds = sounds
        self._timeout = timeout

    def play(self, cue: str) -> None:
        self._sounds.play(cue)

    async def request_audio(self) -> bool:
        effect = self._sounds.effect(TRIAL_CUE)
        if effect is None:
            return False

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout

        # QSoundEffect loads asynchronously; Qt events must keep flowing
        while effect.status() == QSoundEffect.Status.Loading:
            if loop.time() >= deadline:
                return False
            QCoreApplication.processEvents()
            await asyncio.sleep(_PUMP_INTERVAL_S)
        if effect.status() != QSoundEffect.Status.Ready:
            return False

        effect.play()
        started = False
        while loop.time() < deadline:
            QCoreApplication.processEvents()
            if effect.status() == QSoundEffect.Status.Error:
                return False
            if effect.isPlaying():
                started = True
            elif started:
                return True
            await asyncio.sleep(_PUMP_INTERVAL_S)
        return started


class TrayNotifier:
    """System notifications through the tray icon.

    Qt has no notification permission prompt.  Messages count as granted
    once the tray icon is visible on a platform whose tray supports them,
    and as denied where it does not.
    """

    MESSAGE_TIMEOUT_MS = 8000

    def __init__(self, tray: QSystemTrayIcon) -> None:
        self._tray = tray
        self._confirmed = False

    def _supported(self) -> bool:
        return QSystemTrayIcon.isSystemTrayAvailable() and QSystemTrayIcon.supportsMessages()

    def permission_state(self) -> PermissionState:
        if not self._supported():
            return PermissionState.DENIED
        if self._confirmed:
            return PermissionState.GRANTED
        return PermissionState.NOT_REQUESTED

    async def request_permission(self) -> PermissionState:
        if not self._supported():
            return PermissionState.DENIED
        self._tray.show()
        await asyncio.sleep(0)
        self._confirmed = self._tray.isVisible()
        return PermissionState.GRANTED if self._confirmed else PermissionState.DENIED

    def show(self, title: str, body: str) -> None:
        self._tray.showMessage(
            title,
            body,
            QSystemTrayIcon.MessageIcon.Information,
            self.MESSAGE_TIMEOUT_MS,
        )


class WindowAttention(AttentionCapability):
    """Blinks a top-level window's title and alerts the window manager."""

    def __init__(self, window: QWidget, parent: QObject | None = None) -> None:
        super().__init__(parent or window)
        self._window = window
        app = QApplication.instance()
        if app is not None:
            app.applicationStateChanged.connect(self._on_application_state)

    def is_focused(self) -> bool:
        return (
            QApplication.applicationState() == Qt.ApplicationState.ApplicationActive
            and self._window.isActiveWindow()
        )

    def title(self) -> str:
        return self._window.windowTitle()

    def set_title(self, text: str) -> None:
        self._window.setWindowTitle(text)

    def request_attention(self) -> None:
        QApplication.alert(self._window)

    def _on_application_state(self, state: Qt.ApplicationState) -> None:
        if state == Qt.ApplicationState.ApplicationActive:
            self.focus_gained.emit()
