"""Cancellable periodic callback owned by a single engine."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from ..constants import TICK_INTERVAL_SECONDS

TickCallback = Callable[[int], None]


class Ticker:
    """
    Repeating timer built on ``threading.Timer``.

    Each ``start`` opens a new generation and the callback receives its
    generation number. The next timer is armed only after the callback has
    returned, so invocations never overlap. ``stop`` invalidates the current
    generation; a callback already in flight can check ``is_current`` (under
    its owner's lock) and drop itself.
    """

    def __init__(self, interval_seconds: float = TICK_INTERVAL_SECONDS):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._callback: Optional[TickCallback] = None
        self._generation = 0
        self._running = False

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def start(self, callback: TickCallback):
        """Start ticking, replacing any previous schedule."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._callback = callback
            self._running = True
            self._arm(self._generation)

    def stop(self):
        """Stop ticking. Safe to call when already stopped."""
        with self._lock:
            self._cancel_timer()
            if self._running:
                self._generation += 1
            self._running = False
            self._callback = None

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return self._running and generation == self._generation

    def _arm(self, generation: int):
        timer = threading.Timer(self.interval_seconds, self._fire, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int):
        with self._lock:
            if not self._running or generation != self._generation:
                return
            callback = self._callback
            self._timer = None

        # Called without our lock so the callback may stop() us.
        callback(generation)

        with self._lock:
            if self._running and generation == self._generation and self._timer is None:
                self._arm(generation)
