"""Shared fixtures: a controllable clock, a manual ticker, temp storage."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

import pytest

from claudetracker.data.store import StatsStore
from claudetracker.services.sessions import SessionEngine


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        # Mid-month local noon keeps month arithmetic away from boundaries.
        self.current = start or datetime(2025, 3, 15, 12, 0, 0).astimezone()

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


class FakeTicker:
    """Records start/stop calls; fires the callback only via ``fire()``."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[int], None]] = None
        self.generation = 0
        self.running = False
        self.starts = 0
        self.stops = 0

    def start(self, callback: Callable[[int], None]) -> None:
        self.generation += 1
        self.callback = callback
        self.running = True
        self.starts += 1

    def stop(self) -> None:
        if self.running:
            self.generation += 1
        self.running = False
        self.stops += 1

    def is_current(self, generation: int) -> bool:
        return self.running and generation == self.generation

    def fire(self, generation: Optional[int] = None) -> None:
        assert self.callback is not None
        self.callback(self.generation if generation is None else generation)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticker() -> FakeTicker:
    return FakeTicker()


@pytest.fixture
def stats_path(tmp_path: Path) -> Path:
    return tmp_path / "stats.json"


@pytest.fixture
def store(stats_path: Path) -> StatsStore:
    return StatsStore(stats_path)


@pytest.fixture
def make_engine(store: StatsStore, clock: FakeClock, ticker: FakeTicker):
    def _make(**overrides) -> SessionEngine:
        kwargs = {"store": store, "clock": clock, "ticker": ticker}
        kwargs.update(overrides)
        return SessionEngine(**kwargs)

    return _make


@pytest.fixture
def engine(make_engine) -> SessionEngine:
    return make_engine()
