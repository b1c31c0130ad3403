"""Shared utility functions."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


def debug_enabled() -> bool:
    """Whether ``DEBUG_TRACKER=1`` diagnostics are switched on."""
    return os.environ.get("DEBUG_TRACKER") == "1"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime (naive values are UTC)."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_clock(seconds: float) -> str:
    """Format seconds as ``H:MM:SS``."""
    total = max(int(seconds), 0)
    hours = total // 3600
    minutes = total % 3600 // 60
    secs = total % 60
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Format duration in human-readable form: '45s', '5m', '2h 30m'."""
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds / 60)}m"
    hours = int(seconds / 3600)
    minutes = int((seconds % 3600) / 60)
    if minutes > 0:
        return f"{hours}h {minutes}m"
    return f"{hours}h"


def atomic_write_json(path: Path, data: Dict[str, Any], preserve_permissions: bool = True):
    """Atomically write JSON to disk with optional permission preservation."""
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    mode = 0o600
    if preserve_permissions and path.exists():
        try:
            mode = path.stat().st_mode & 0o777
        except OSError:
            pass

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
            handle.flush()
            os.fsync(handle.fileno())

        os.replace(tmp_path, path)
        os.chmod(path, mode)
    except Exception:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise
