"""Rich formatting helpers for claudetracker presentation layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table

from ..constants import LOW_REMAINING_THRESHOLD, MESSAGE_DISPLAY_LIMIT, MONTHLY_QUOTA, SESSION_LIMIT_SECONDS
from ..core.models import MonthlyStats, Session
from ..utils import format_clock, format_duration


def format_remaining_sessions(remaining: int) -> str:
   """Color remaining sessions red once they run low."""
   if remaining <= LOW_REMAINING_THRESHOLD:
      return f"[red]{remaining}[/red]"
   return str(remaining)


def session_progress(session: Session, now: datetime) -> float:
   """Fraction of the session limit already used, 0.0 to 1.0."""
   return min(1.0, 1.0 - session.remaining_time(now) / SESSION_LIMIT_SECONDS)


def render_status_panel(stats: MonthlyStats, now: datetime) -> Panel:
   """Render the active session (if any) plus monthly usage."""
   session = stats.active_session
   parts = []

   if session is not None:
      parts.append("[green]Session Active[/green]")
      parts.append(f"[bold]{format_clock(session.remaining_time(now))}[/bold] remaining")
      parts.append(
         ProgressBar(total=SESSION_LIMIT_SECONDS, completed=SESSION_LIMIT_SECONDS * session_progress(session, now))
      )
   else:
      parts.append("[dim]No Active Session[/dim]")

   usage = Table.grid(padding=(0, 2))
   usage.add_column()
   usage.add_column(justify="right")
   usage.add_row("Sessions Used:", f"{stats.used_sessions}/{MONTHLY_QUOTA}")
   usage.add_row("Remaining:", format_remaining_sessions(stats.remaining_sessions))
   if session is not None:
      usage.add_row("Messages:", f"{session.message_count}/{MESSAGE_DISPLAY_LIMIT}")
   parts.append(usage)

   return Panel(Group(*parts), title=f"Claude Tracker · {stats.year_month}", box=box.ROUNDED, width=40)


def render_history_table(stats: MonthlyStats, now: datetime) -> Table:
   """Render this month's sessions as Rich table."""
   table = Table(title=f"Sessions for {stats.year_month}", box=box.ROUNDED)
   table.add_column("#", style="cyan", justify="right")
   table.add_column("Started", style="magenta")
   table.add_column("Ended", style="blue")
   table.add_column("Duration", style="yellow", justify="right")
   table.add_column("Messages", justify="right")
   table.add_column("State", justify="center")

   for index, session in enumerate(stats.sessions, start=1):
      started = session.start.astimezone().strftime("%Y-%m-%d %H:%M")
      ended = session.end.astimezone().strftime("%Y-%m-%d %H:%M") if session.end else "[dim]--[/dim]"
      state = "[green]active[/green]" if session.is_active else "[dim]closed[/dim]"
      table.add_row(
         str(index),
         started,
         ended,
         format_duration(session.duration(now)),
         str(session.message_count),
         state,
      )

   return table


def status_to_json(stats: MonthlyStats, now: datetime) -> Dict[str, Any]:
   """Machine-readable status document."""
   session = stats.active_session
   active: Optional[Dict[str, Any]] = None
   if session is not None:
      active = session.to_dict()
      active["durationSeconds"] = session.duration(now)
      active["remainingSeconds"] = session.remaining_time(now)

   return {
      "yearMonth": stats.year_month.to_dict(),
      "usedSessions": stats.used_sessions,
      "remainingSessions": stats.remaining_sessions,
      "quota": MONTHLY_QUOTA,
      "activeSession": active,
   }


def history_to_json(stats: MonthlyStats, now: datetime) -> Dict[str, Any]:
   """Machine-readable list of this month's sessions."""
   sessions = []
   for session in stats.sessions:
      entry = session.to_dict()
      entry["durationSeconds"] = session.duration(now)
      sessions.append(entry)

   return {
      "yearMonth": stats.year_month.to_dict(),
      "sessions": sessions,
      "total": len(sessions),
   }
