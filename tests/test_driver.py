"""Tests for the anchor-based countdown driver."""

from PyQt6.QtTest import QTest

from focusmove.timer.config import TimerConfig
from focusmove.timer.driver import POLL_INTERVAL_MS
from focusmove.timer.engine import Phase, PhaseEventKind, SessionEngine

from helpers import SignalCollector, run_for


class TestPolling:

    def test_default_interval(self, engine):
        assert engine.driver.interval_ms == POLL_INTERVAL_MS == 100

    def test_tick_only_when_whole_second_changes(self, engine, clock):
        ticks = SignalCollector()
        engine.tick.connect(ticks)
        engine.start()

        engine.driver.poll()                # 1500
        run_for(engine, clock, 0.3)         # still 1500
        run_for(engine, clock, 0.3)         # still 1500
        run_for(engine, clock, 0.5)         # 1498.9 -> 1499

        assert ticks.items == [1500, 1499]

    def test_late_poll_reports_true_remaining(self, engine, clock):
        ticks = SignalCollector()
        engine.tick.connect(ticks)
        engine.start()

        # window hidden for ten minutes, no polls delivered meanwhile
        run_for(engine, clock, 600)

        assert ticks.last == 900
        assert engine.remaining_seconds == 900

    def test_overdue_phase_completes_exactly_once(self, engine, clock):
        events = SignalCollector()
        engine.phase_event.connect(events)
        engine.start()
        events.clear()

        # asleep for an hour: one transition, not several
        run_for(engine, clock, 3600)
        engine.driver.poll()
        engine.driver.poll()

        assert [e.kind for e in events.items] == [PhaseEventKind.WORK_COMPLETED]
        assert engine.awaiting_exercise
        assert engine.completed_work_sessions == 1

    def test_zero_tick_emitted_before_completion(self, engine, clock):
        ticks = SignalCollector()
        engine.tick.connect(ticks)
        engine.start()
        run_for(engine, clock, 1500)
        assert ticks.last == 0

    def test_poll_when_not_running_disarms(self, engine):
        engine.start()
        engine.pause()
        engine.driver.arm()
        engine.driver.poll()
        assert not engine.driver.is_armed

    def test_rearm_resets_tick_memory(self, engine, clock):
        ticks = SignalCollector()
        engine.tick.connect(ticks)
        engine.start()
        engine.driver.poll()
        engine.pause()
        engine.start()
        engine.driver.poll()
        assert ticks.items == [1500, 1500]

    def test_dispose_stops_polling(self, engine):
        engine.start()
        engine.driver.dispose()
        assert not engine.driver.is_armed


class TestRealTimer:

    def test_qtimer_drives_the_engine(self, qapp, clock):
        engine = SessionEngine(
            config=TimerConfig(work_minutes=1), clock=clock, poll_interval_ms=5,
        )
        engine.start()
        clock.advance(60)

        QTest.qWait(100)

        assert engine.phase is Phase.IDLE
        assert engine.awaiting_exercise
        assert not engine.driver.is_armed

    def test_only_one_poll_timer_active(self, qapp, clock):
        engine = SessionEngine(clock=clock, poll_interval_ms=5)
        ticks = SignalCollector()
        engine.tick.connect(ticks)
        engine.start()
        engine.pause()
        engine.start()
        engine.pause()
        engine.start()

        QTest.qWait(60)

        # time is frozen, so a single active poll emits a single tick
        assert ticks.items == [1500]
