"""Tests for the session/quota engine.

A ``FakeClock`` drives time and a ``FakeTicker`` stands in for the background
timer, so every transition happens synchronously inside the test.
"""

from __future__ import annotations

import json
import math
from datetime import datetime

import pytest

from claudetracker.constants import MONTHLY_QUOTA, SESSION_LIMIT_SECONDS
from claudetracker.core.errors import NoActiveSession, QuotaReached, SessionAlreadyActive
from claudetracker.core.models import MonthlyStats, YearMonth

from .conftest import FakeClock, FakeTicker


def _active_count(stats: MonthlyStats) -> int:
    return sum(1 for s in stats.sessions if s.is_active)


def test_start_session(engine, ticker: FakeTicker) -> None:
    engine.start_session()

    assert engine.active_session is not None
    assert engine.used_sessions == 1
    assert engine.remaining_sessions == MONTHLY_QUOTA - 1
    assert ticker.running


def test_start_session_persists_record(engine, stats_path) -> None:
    session = engine.start_session()

    data = json.loads(stats_path.read_text())
    assert data["yearMonth"] == {"year": 2025, "month": 3}
    assert data["sessions"][0]["id"] == session.id
    assert data["sessions"][0]["end"] is None
    assert data["sessions"][0]["messageCount"] == 0


def test_start_session_when_already_active(engine) -> None:
    engine.start_session()
    before = engine.stats

    with pytest.raises(SessionAlreadyActive) as excinfo:
        engine.start_session()

    assert str(excinfo.value) == "A session is already active"
    assert engine.stats == before


def test_stop_session_records_duration(engine, clock: FakeClock, ticker: FakeTicker) -> None:
    engine.start_session()
    clock.advance(100)

    closed = engine.stop_session()

    assert engine.active_session is None
    assert closed.end == clock.now()
    assert math.isclose(closed.duration(clock.now()), 100.0, abs_tol=1.0)
    assert not ticker.running


def test_stop_session_when_none_active(engine) -> None:
    before = engine.stats

    with pytest.raises(NoActiveSession) as excinfo:
        engine.stop_session()

    assert str(excinfo.value) == "No active session found"
    assert engine.stats == before


def test_second_stop_fails(engine) -> None:
    engine.start_session()
    engine.stop_session()

    with pytest.raises(NoActiveSession):
        engine.stop_session()


def test_auto_stop_after_five_hours(engine, clock: FakeClock, ticker: FakeTicker, stats_path) -> None:
    engine.start_session()
    clock.advance(SESSION_LIMIT_SECONDS)

    engine.tick()

    assert engine.active_session is None
    closed = engine.stats.sessions[0]
    assert closed.end == clock.now()
    assert not ticker.running
    assert json.loads(stats_path.read_text())["sessions"][0]["end"] is not None


def test_tick_before_limit_keeps_session(engine, clock: FakeClock, ticker: FakeTicker) -> None:
    engine.start_session()
    clock.advance(SESSION_LIMIT_SECONDS - 1)

    engine.tick()

    assert engine.active_session is not None
    assert ticker.running


def test_quota_reached(engine) -> None:
    for _ in range(MONTHLY_QUOTA):
        engine.start_session()
        engine.stop_session()

    assert engine.remaining_sessions == 0
    with pytest.raises(QuotaReached) as excinfo:
        engine.start_session()
    assert str(excinfo.value) == "Monthly quota of 50 sessions reached"
    assert engine.used_sessions == MONTHLY_QUOTA


def test_session_remaining_time(engine, clock: FakeClock) -> None:
    session = engine.start_session()
    clock.advance(3600)

    assert math.isclose(session.remaining_time(clock.now()), 4 * 3600, abs_tol=1.0)


def test_monthly_rollover_on_start(engine, clock: FakeClock) -> None:
    for _ in range(MONTHLY_QUOTA):
        engine.start_session()
        engine.stop_session()
    assert engine.remaining_sessions == 0

    clock.advance(32 * 24 * 60 * 60)
    engine.start_session()

    assert engine.stats.year_month == YearMonth(2025, 4)
    assert engine.used_sessions == 1
    assert engine.remaining_sessions == MONTHLY_QUOTA - 1


def test_monthly_rollover_on_restore(make_engine, engine, clock: FakeClock, stats_path) -> None:
    for _ in range(MONTHLY_QUOTA):
        engine.start_session()
        engine.stop_session()

    clock.advance(32 * 24 * 60 * 60)
    fresh = make_engine(ticker=FakeTicker())

    assert fresh.used_sessions == 0
    fresh.start_session()
    assert fresh.used_sessions == 1
    assert fresh.remaining_sessions == MONTHLY_QUOTA - 1
    data = json.loads(stats_path.read_text())
    assert data["yearMonth"] == {"year": 2025, "month": 4}
    assert len(data["sessions"]) == 1


def test_restore_same_month_resumes_active_session(make_engine, engine, clock: FakeClock) -> None:
    started = engine.start_session()
    clock.advance(60)

    ticker = FakeTicker()
    restored = make_engine(ticker=ticker)

    assert restored.active_session is not None
    assert restored.active_session.id == started.id
    assert ticker.running


def test_restore_ignores_corrupt_file(make_engine, stats_path) -> None:
    stats_path.write_text("{not json")

    restored = make_engine()

    assert restored.used_sessions == 0
    assert restored.stats.year_month == YearMonth(2025, 3)


def test_write_failure_is_swallowed(make_engine, tmp_path, clock: FakeClock) -> None:
    from claudetracker.data.store import StatsStore

    blocker = tmp_path / "blocker"
    blocker.write_text("")
    # Parent "directory" is a regular file, so every write fails.
    engine = make_engine(store=StatsStore(blocker / "stats.json"))

    engine.start_session()
    clock.advance(10)
    engine.stop_session()

    assert engine.used_sessions == 1
    assert engine.active_session is None


def test_tick_without_active_session(engine, ticker: FakeTicker, stats_path) -> None:
    before = engine.stats

    engine.tick()
    engine.tick()

    assert engine.stats == before
    assert engine.active_session is None
    assert not ticker.running
    assert not stats_path.exists()


def test_scheduled_tick_expires_session(engine, clock: FakeClock, ticker: FakeTicker) -> None:
    engine.start_session()
    clock.advance(SESSION_LIMIT_SECONDS + 5)

    ticker.fire()

    assert engine.active_session is None


def test_stale_scheduled_tick_is_dropped(engine, clock: FakeClock, ticker: FakeTicker) -> None:
    engine.start_session()
    stale_generation = ticker.generation
    engine.stop_session()
    engine.start_session()
    clock.advance(SESSION_LIMIT_SECONDS)

    ticker.fire(stale_generation)

    assert engine.active_session is not None


def test_observers_notified(engine, clock: FakeClock) -> None:
    calls = []
    unsubscribe = engine.subscribe(lambda: calls.append(engine.active_session is not None))

    engine.start_session()
    engine.tick()
    clock.advance(10)
    engine.stop_session()
    assert calls == [True, True, False]

    unsubscribe()
    engine.tick()
    assert len(calls) == 3


def test_failing_observer_does_not_break_engine(engine) -> None:
    seen = []

    def broken() -> None:
        raise RuntimeError("boom")

    engine.subscribe(broken)
    engine.subscribe(lambda: seen.append(True))

    engine.start_session()

    assert seen == [True]
    assert engine.active_session is not None


def test_stats_snapshot_is_detached(engine) -> None:
    engine.start_session()
    snapshot = engine.stats
    snapshot.sessions.clear()

    assert engine.used_sessions == 1


def test_at_most_one_active_over_mixed_sequence(engine, clock: FakeClock) -> None:
    actions = ["start", "start", "tick", "stop", "stop", "start", "tick", "start", "stop", "tick"]
    for step, action in enumerate(actions):
        clock.advance(SESSION_LIMIT_SECONDS / 3)
        try:
            if action == "start":
                engine.start_session()
            elif action == "stop":
                engine.stop_session()
            else:
                engine.tick()
        except (SessionAlreadyActive, NoActiveSession):
            pass
        assert _active_count(engine.stats) <= 1, f"step {step}"


def test_close_stops_ticker(engine, ticker: FakeTicker) -> None:
    engine.start_session()
    engine.close()

    assert not ticker.running


def test_construction_reads_time_only_from_clock(make_engine) -> None:
    clock = FakeClock(datetime(2024, 11, 10, 9, 30).astimezone())
    engine = make_engine(clock=clock)

    assert engine.stats.year_month == YearMonth(2024, 11)


def test_catch_up_expiry_closes_at_tick_time(make_engine, engine, clock: FakeClock) -> None:
    engine.start_session()
    engine.close()
    clock.advance(SESSION_LIMIT_SECONDS + 60)

    restored = make_engine(ticker=FakeTicker())
    restored.tick()

    closed = restored.stats.sessions[0]
    assert restored.active_session is None
    assert closed.end == clock.now()
    assert closed.duration(clock.now()) == SESSION_LIMIT_SECONDS + 60
