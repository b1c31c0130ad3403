"""Time source abstraction.

The engine reads the current instant only through a ``Clock`` so tests can
drive it without waiting on the wall clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
   """Source of the current instant."""

   def now(self) -> datetime:
      """Return a timezone-aware datetime."""


class SystemClock:
   """Production clock backed by the system wall clock."""

   def now(self) -> datetime:
      return datetime.now(timezone.utc)
