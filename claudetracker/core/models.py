"""Core domain models for claudetracker."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..constants import FALLBACK_MONTH, FALLBACK_YEAR, MONTHLY_QUOTA, SESSION_LIMIT_SECONDS
from ..utils import parse_timestamp


def _require_int(data: Dict[str, Any], key: str) -> int:
   value = data[key]
   if isinstance(value, bool) or not isinstance(value, int):
      raise ValueError(f"{key!r} must be an integer, got {value!r}")
   return value


@dataclass(frozen=True)
class YearMonth:
   """Calendar month bucket a quota applies to."""

   year: int
   month: int

   def __post_init__(self):
      if not 1 <= self.month <= 12:
         raise ValueError(f"month out of range: {self.month}")

   @classmethod
   def from_instant(cls, instant: datetime) -> YearMonth:
      """Bucket an instant by the local calendar's year and month."""
      try:
         local = instant.astimezone()
         return cls(year=local.year, month=local.month)
      except (OverflowError, OSError, ValueError):
         return cls(year=FALLBACK_YEAR, month=FALLBACK_MONTH)

   def to_dict(self) -> Dict[str, int]:
      return {"year": self.year, "month": self.month}

   @classmethod
   def from_dict(cls, data: Dict[str, Any]) -> YearMonth:
      return cls(year=_require_int(data, "year"), month=_require_int(data, "month"))

   def __str__(self) -> str:
      return f"{self.year:04d}-{self.month:02d}"


class SessionState(str, Enum):
   ACTIVE = "active"
   CLOSED = "closed"


@dataclass
class Session:
   """
   One tracked usage window.

   ``state`` is the tag; ``end`` is set exactly when the state is CLOSED and
   never cleared afterwards.
   """

   id: str
   start: datetime
   end: Optional[datetime] = None
   message_count: int = 0
   state: SessionState = SessionState.ACTIVE

   def __post_init__(self):
      if self.message_count < 0:
         raise ValueError("message_count must be >= 0")
      if (self.end is None) != (self.state is SessionState.ACTIVE):
         raise ValueError(f"session {self.id}: end and state disagree")
      if self.end is not None and self.end < self.start:
         raise ValueError(f"session {self.id}: end precedes start")

   @classmethod
   def begin(cls, start: datetime) -> Session:
      """Create a new active session with a fresh id."""
      return cls(id=str(uuid.uuid4()), start=start)

   @property
   def is_active(self) -> bool:
      return self.state is SessionState.ACTIVE

   def close(self, at: datetime):
      """Transition ACTIVE -> CLOSED. Closing twice is a programming error."""
      if not self.is_active:
         raise ValueError(f"session {self.id} is already closed")
      # Clock steps backwards would otherwise yield a negative duration.
      self.end = max(at, self.start)
      self.state = SessionState.CLOSED

   def duration(self, at: datetime) -> float:
      """Seconds elapsed from start to end (or ``at`` while active)."""
      until = self.end if self.end is not None else at
      return max((until - self.start).total_seconds(), 0.0)

   def remaining_time(self, at: datetime) -> float:
      """Seconds left before the session reaches its limit."""
      return max(0.0, SESSION_LIMIT_SECONDS - self.duration(at))

   def to_dict(self) -> Dict[str, Any]:
      return {
         "id": self.id,
         "start": self.start.isoformat(),
         "end": self.end.isoformat() if self.end is not None else None,
         "messageCount": self.message_count,
      }

   @classmethod
   def from_dict(cls, data: Dict[str, Any]) -> Session:
      session_id = data["id"]
      if not isinstance(session_id, str) or not session_id:
         raise ValueError(f"invalid session id: {session_id!r}")
      end_raw = data.get("end")
      end = parse_timestamp(end_raw) if end_raw is not None else None
      return cls(
         id=session_id,
         start=parse_timestamp(data["start"]),
         end=end,
         message_count=_require_int(data, "messageCount"),
         state=SessionState.ACTIVE if end is None else SessionState.CLOSED,
      )


@dataclass
class MonthlyStats:
   """
   Persisted root record: one month's append-only session log.

   ``active_session_id`` points at the single ACTIVE session, if any. Sessions
   are only appended while it is empty, which keeps at most one active.
   """

   year_month: YearMonth
   sessions: List[Session] = field(default_factory=list)
   active_session_id: Optional[str] = None

   @property
   def used_sessions(self) -> int:
      return len(self.sessions)

   @property
   def remaining_sessions(self) -> int:
      return max(0, MONTHLY_QUOTA - self.used_sessions)

   @property
   def active_session(self) -> Optional[Session]:
      if self.active_session_id is None:
         return None
      for session in self.sessions:
         if session.id == self.active_session_id:
            return session
      return None

   def open_session(self, start: datetime) -> Session:
      """Append a new ACTIVE session."""
      if self.active_session_id is not None:
         raise ValueError("a session is already active")
      session = Session.begin(start)
      self.sessions.append(session)
      self.active_session_id = session.id
      return session

   def close_active(self, at: datetime) -> Session:
      """Close the ACTIVE session and clear the pointer."""
      session = self.active_session
      if session is None:
         raise ValueError("no active session")
      session.close(at)
      self.active_session_id = None
      return session

   def to_dict(self) -> Dict[str, Any]:
      return {
         "yearMonth": self.year_month.to_dict(),
         "sessions": [session.to_dict() for session in self.sessions],
      }

   @classmethod
   def from_dict(cls, data: Dict[str, Any]) -> MonthlyStats:
      """Decode and validate a persisted record; raises ValueError if malformed."""
      if not isinstance(data, dict):
         raise ValueError("record must be a JSON object")
      raw_sessions = data["sessions"]
      if not isinstance(raw_sessions, list):
         raise ValueError("'sessions' must be a list")

      sessions = [Session.from_dict(item) for item in raw_sessions]

      ids = [session.id for session in sessions]
      if len(set(ids)) != len(ids):
         raise ValueError("duplicate session ids")

      active = [session for session in sessions if session.is_active]
      if len(active) > 1:
         raise ValueError(f"{len(active)} sessions are active, expected at most one")

      return cls(
         year_month=YearMonth.from_dict(data["yearMonth"]),
         sessions=sessions,
         active_session_id=active[0].id if active else None,
      )
