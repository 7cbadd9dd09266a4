"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/FocusMove/settings.json

Only preferences live here.  The running timer itself is never saved.

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .errors import ValidationError
from .timer.config import TimerConfig

logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusMove"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

_TIMER_FIELDS = ("work_minutes", "break_minutes", "long_break_minutes",
                 "sessions_before_long_break")


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_minutes: int = 25
    break_minutes: int = 5
    long_break_minutes: int = 15
    sessions_before_long_break: int = 4

    # ── audio ─────────────────────────────────────────────────────────
    sound_volume: int = 70                 # 0-100

    # ── window ────────────────────────────────────────────────────────
    minimize_to_tray: bool = True

    def timer_config(self) -> TimerConfig:
        """Build a validated ``TimerConfig`` (raises ``ValidationError``)."""
        return TimerConfig(**{name: getattr(self, name) for name in _TIMER_FIELDS})

    def apply_timer_config(self, config: TimerConfig) -> None:
        for name, value in config.as_dict().items():
            setattr(self, name, value)


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        valid_keys = {f.name for f in fields(Settings)}
        settings = Settings(**{k: v for k, v in data.items() if k in valid_keys})
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", SETTINGS_PATH, exc)
        return Settings()

    try:
        settings.timer_config()
    except ValidationError as exc:
        logger.warning("Invalid timer settings (%s), using defaults", exc)
        settings.apply_timer_config(TimerConfig())
    return settings


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
