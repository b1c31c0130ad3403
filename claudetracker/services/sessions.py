"""Session lifecycle and monthly quota enforcement."""

from __future__ import annotations

import copy
import threading
from typing import Callable, List, Optional

from ..constants import SESSION_LIMIT_SECONDS, console
from ..core.clock import Clock, SystemClock
from ..core.errors import NoActiveSession, QuotaReached, SessionAlreadyActive
from ..core.models import MonthlyStats, Session, YearMonth
from ..data.store import StatsStore
from ..infrastructure.ticker import Ticker
from ..utils import debug_enabled

Observer = Callable[[], None]


class SessionEngine:
    """
    Owns the current month's stats record.

    Responsibilities:
    - Restore the persisted record for the current month on construction
    - Start and stop sessions against the monthly quota
    - Auto-expire the active session once it reaches the session limit
    - Roll over to a fresh record when the calendar month changes
    - Persist the whole record after every mutation

    All operations and reads are serialised by one re-entrant lock. Observers
    are notified after each mutation and each tick, outside that lock.
    """

    def __init__(
        self,
        store: StatsStore,
        clock: Optional[Clock] = None,
        ticker: Optional[Ticker] = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.ticker = ticker or Ticker()
        self._lock = threading.RLock()
        self._observers: List[Observer] = []

        current = YearMonth.from_instant(self.clock.now())
        self._stats = MonthlyStats(year_month=current)

        saved = self.store.load()
        if saved is not None and saved.year_month == current:
            self._stats = saved
        elif saved is not None and debug_enabled():
            console.print(f"[dim][DEBUG] Discarding stats for {saved.year_month}; current month is {current}[/dim]")

        if self._stats.active_session is not None:
            self._start_ticker()

    # Reads

    @property
    def stats(self) -> MonthlyStats:
        """Snapshot of the current record."""
        with self._lock:
            return copy.deepcopy(self._stats)

    @property
    def active_session(self) -> Optional[Session]:
        with self._lock:
            return copy.deepcopy(self._stats.active_session)

    @property
    def used_sessions(self) -> int:
        with self._lock:
            return self._stats.used_sessions

    @property
    def remaining_sessions(self) -> int:
        with self._lock:
            return self._stats.remaining_sessions

    # Operations

    def start_session(self) -> Session:
        """
        Open a new session.

        Returns:
           Snapshot of the new session

        Raises:
           QuotaReached: If this month's quota is used up
           SessionAlreadyActive: If a session is already running
        """
        with self._lock:
            now = self.clock.now()
            current = YearMonth.from_instant(now)
            if self._stats.year_month != current:
                self._stats = MonthlyStats(year_month=current)

            if self._stats.remaining_sessions == 0:
                raise QuotaReached()
            if self._stats.active_session is not None:
                raise SessionAlreadyActive()

            session = self._stats.open_session(now)
            self._start_ticker()
            self._save()
            result = copy.deepcopy(session)

        self._notify()
        return result

    def stop_session(self) -> Session:
        """
        Close the active session.

        Returns:
           Snapshot of the closed session

        Raises:
           NoActiveSession: If nothing is running
        """
        with self._lock:
            if self._stats.active_session is None:
                raise NoActiveSession()

            session = self._stats.close_active(self.clock.now())
            self.ticker.stop()
            self._save()
            result = copy.deepcopy(session)

        self._notify()
        return result

    def tick(self):
        """Advance time-driven state: auto-expire the active session at its limit."""
        with self._lock:
            self._tick_locked()
        self._notify()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a change observer. Returns a function that unsubscribes it."""
        with self._lock:
            self._observers.append(observer)

        def unsubscribe():
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def close(self):
        """Stop background ticking. State is already persisted."""
        with self._lock:
            self.ticker.stop()

    # Internals

    def _tick_locked(self):
        session = self._stats.active_session
        if session is None:
            self.ticker.stop()
            return

        now = self.clock.now()
        if session.duration(now) >= SESSION_LIMIT_SECONDS:
            self._stats.close_active(now)
            self.ticker.stop()
            self._save()

    def _scheduled_tick(self, generation: int):
        with self._lock:
            if not self.ticker.is_current(generation):
                if debug_enabled():
                    console.print(f"[dim][DEBUG] Dropping stale tick (generation {generation})[/dim]")
                return
            self._tick_locked()
        self._notify()

    def _start_ticker(self):
        self.ticker.start(self._scheduled_tick)

    def _save(self):
        # Write failures are not surfaced; in-memory state stays authoritative.
        self.store.save(self._stats)

    def _notify(self):
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                observer()
            except Exception as exc:
                console.print(f"[yellow]Warning: Session observer failed: {exc}[/yellow]")
