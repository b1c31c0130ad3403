"""Domain-specific exceptions for claudetracker."""

from __future__ import annotations

from typing import Optional

from ..constants import MONTHLY_QUOTA


class TrackerError(Exception):
   """Base exception for all claudetracker domain errors."""

   message = "Session tracker error"

   def __init__(self, message: Optional[str] = None):
      super().__init__(message or self.message)


class QuotaReached(TrackerError):
   """Monthly session quota is used up until the next calendar month."""

   message = f"Monthly quota of {MONTHLY_QUOTA} sessions reached"


class SessionAlreadyActive(TrackerError):
   """A session is running; it must be stopped before starting another."""

   message = "A session is already active"


class NoActiveSession(TrackerError):
   """Stop was requested while no session is running."""

   message = "No active session found"
