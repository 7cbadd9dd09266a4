"""Notification package."""

from .attention import TitleBlinker
from .capabilities import (
    AttentionCapability,
    AudioCapability,
    NotificationCapability,
    PermissionState,
    QtAudio,
    TrayNotifier,
    WindowAttention,
)
from .dispatcher import CHANNELS, NotificationDispatcher
from .events import Notification, build_notification

__all__ = [
    "TitleBlinker",
    "AttentionCapability",
    "AudioCapability",
    "NotificationCapability",
    "PermissionState",
    "QtAudio",
    "TrayNotifier",
    "WindowAttention",
    "CHANNELS",
    "NotificationDispatcher",
    "Notification",
    "build_notification",
]
