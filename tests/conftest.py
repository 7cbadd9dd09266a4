"""Shared pytest fixtures for FocusMove tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from focusmove.timer.config import TimerConfig  # noqa: E402
from focusmove.timer.engine import SessionEngine  # noqa: E402

from helpers import FakeClock  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(qapp, clock):
    """Fresh SessionEngine with default config on a fake clock."""
    return SessionEngine(parent=None, clock=clock)


@pytest.fixture
def short_engine(qapp, clock):
    """One-minute phases, long break after every second work session."""
    config = TimerConfig(
        work_minutes=1,
        break_minutes=1,
        long_break_minutes=1,
        sessions_before_long_break=2,
    )
    return SessionEngine(parent=None, config=config, clock=clock)
