"""Configuration helpers for tracker defaults."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .constants import CONFIG_PATH, STATS_PATH, TICK_INTERVAL_SECONDS
from .utils import atomic_write_json


@dataclass
class TrackerConfig:
    tick_interval_seconds: float = TICK_INTERVAL_SECONDS
    stats_path: Path = STATS_PATH


def _default_config() -> Dict[str, Any]:
    return {
        "tick_interval_seconds": TICK_INTERVAL_SECONDS,
        "stats_path": str(STATS_PATH),
    }


def _coerce(raw: Dict[str, Any]) -> TrackerConfig:
    config = TrackerConfig()

    interval = raw.get("tick_interval_seconds")
    if isinstance(interval, (int, float)) and not isinstance(interval, bool) and interval > 0:
        config.tick_interval_seconds = float(interval)

    stats_path = raw.get("stats_path")
    if isinstance(stats_path, str) and stats_path.strip():
        config.stats_path = Path(stats_path).expanduser()

    return config


def load_tracker_config(config_path: Path = CONFIG_PATH) -> TrackerConfig:
    """Load tracker configuration, creating defaults if missing."""
    defaults = _default_config()

    if not config_path.exists():
        try:
            atomic_write_json(config_path, defaults, preserve_permissions=False)
        except Exception:
            return _coerce(defaults)

    try:
        with open(config_path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
        merged = defaults.copy()
        if isinstance(data, dict):
            merged.update(data)
        return _coerce(merged)
    except Exception:
        return _coerce(defaults)
