"""JSON file repository for the monthly stats record."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..constants import STATS_PATH, console
from ..core.models import MonthlyStats
from ..utils import atomic_write_json, debug_enabled


class StatsStore:
   """
   Whole-record persistence for ``MonthlyStats``.

   The file location is fixed when the store is created. Reads and writes are
   best-effort: a missing or corrupt file loads as "no prior state", and a
   failed write leaves the previous file in place and is not raised.
   """

   def __init__(self, path: Path = STATS_PATH):
      self.path = Path(path).expanduser()

   def load(self) -> Optional[MonthlyStats]:
      """Return the persisted record, or None if absent or unreadable."""
      try:
         with open(self.path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
      except FileNotFoundError:
         return None
      except (OSError, ValueError) as exc:
         if debug_enabled():
            console.print(f"[dim][DEBUG] Ignoring unreadable stats file {self.path}: {exc}[/dim]")
         return None

      try:
         return MonthlyStats.from_dict(data)
      except (KeyError, TypeError, ValueError, AttributeError) as exc:
         if debug_enabled():
            console.print(f"[dim][DEBUG] Ignoring malformed stats record in {self.path}: {exc!r}[/dim]")
         return None

   def save(self, stats: MonthlyStats) -> bool:
      """Overwrite the file with ``stats``. Returns False if the write failed."""
      try:
         atomic_write_json(self.path, stats.to_dict())
         return True
      except Exception as exc:
         if debug_enabled():
            console.print(f"[dim][DEBUG] Failed to save stats to {self.path}: {exc}[/dim]")
         return False
