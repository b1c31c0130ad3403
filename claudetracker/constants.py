"""Shared constants for the claudetracker package."""

from pathlib import Path

from .presentation.console import console

# Paths
TRACKER_DIR = Path.home() / ".claudetracker"
STATS_PATH = TRACKER_DIR / "stats.json"
CONFIG_PATH = TRACKER_DIR / "config.json"
LOCK_PATH = TRACKER_DIR / ".lock"

# Quota rules
MONTHLY_QUOTA = 50  # sessions per calendar month
SESSION_LIMIT_SECONDS = 5 * 60 * 60  # auto-expiry threshold
MESSAGE_DISPLAY_LIMIT = 250  # shown next to the active session's message count
LOW_REMAINING_THRESHOLD = 10  # highlight remaining sessions at or below this

# Scheduling
TICK_INTERVAL_SECONDS = 1.0

# Used when the local calendar cannot resolve an instant
FALLBACK_YEAR = 2025
FALLBACK_MONTH = 1
