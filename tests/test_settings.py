"""Tests for Settings defaults and JSON persistence."""

from __future__ import annotations

import json

import pytest

from focusmove.settings import Settings, load_settings, save_settings
from focusmove.timer.config import TimerConfig


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    monkeypatch.setattr("focusmove.settings.SETTINGS_PATH", path)
    monkeypatch.setattr("focusmove.settings.APP_SUPPORT_DIR", tmp_path)
    return path


class TestSettingsDefaults:
    def test_timer_defaults(self):
        s = Settings()
        assert s.work_minutes == 25
        assert s.break_minutes == 5
        assert s.long_break_minutes == 15
        assert s.sessions_before_long_break == 4

    def test_volume_default(self):
        assert Settings().sound_volume == 70

    def test_minimize_to_tray_default(self):
        assert Settings().minimize_to_tray is True

    def test_timer_config(self):
        assert Settings().timer_config() == TimerConfig()

    def test_apply_timer_config(self):
        s = Settings()
        s.apply_timer_config(TimerConfig(50, 10, 30, 2))
        assert (s.work_minutes, s.break_minutes) == (50, 10)
        assert s.long_break_minutes == 30
        assert s.sessions_before_long_break == 2


class TestSettingsPersistence:
    def test_round_trip(self, settings_path):
        s = Settings(work_minutes=45, sound_volume=20, minimize_to_tray=False)
        save_settings(s)

        loaded = load_settings()

        assert loaded == s
        assert json.loads(settings_path.read_text())["work_minutes"] == 45

    def test_save_creates_directory(self, tmp_path, monkeypatch):
        target = tmp_path / "nested" / "FocusMove"
        monkeypatch.setattr("focusmove.settings.APP_SUPPORT_DIR", target)
        monkeypatch.setattr("focusmove.settings.SETTINGS_PATH", target / "settings.json")
        save_settings(Settings())
        assert (target / "settings.json").exists()

    def test_missing_file_returns_defaults(self, settings_path):
        assert load_settings() == Settings()

    def test_invalid_json_returns_defaults(self, settings_path):
        settings_path.write_text("{not json")
        assert load_settings() == Settings()

    def test_non_object_json_returns_defaults(self, settings_path):
        settings_path.write_text("[1, 2, 3]")
        assert load_settings() == Settings()

    def test_extra_keys_ignored(self, settings_path):
        settings_path.write_text(json.dumps({"work_minutes": 30, "theme": "dark"}))
        s = load_settings()
        assert s.work_minutes == 30
        assert not hasattr(s, "theme")

    def test_out_of_range_timer_values_fall_back(self, settings_path):
        settings_path.write_text(json.dumps({
            "work_minutes": 500,
            "break_minutes": 7,
            "sound_volume": 15,
        }))
        s = load_settings()
        assert s.timer_config() == TimerConfig()
        assert s.sound_volume == 15
