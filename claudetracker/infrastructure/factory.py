"""Service factory for dependency injection."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..config import TrackerConfig, load_tracker_config
from ..constants import CONFIG_PATH
from ..core.clock import Clock, SystemClock
from ..data.store import StatsStore
from ..services.sessions import SessionEngine
from .locking import acquire_lock
from .ticker import Ticker


class ServiceFactory:
    """Factory for creating service instances with dependencies."""

    def __init__(
        self,
        config_path: Path = CONFIG_PATH,
        stats_path: Optional[Path] = None,
        clock: Optional[Clock] = None,
    ):
        self.config_path = config_path
        self.stats_path_override = stats_path
        self.clock = clock or SystemClock()
        self._config: Optional[TrackerConfig] = None
        self._store: Optional[StatsStore] = None
        self._engine: Optional[SessionEngine] = None

    def get_config(self) -> TrackerConfig:
        """Get or load TrackerConfig."""
        if self._config is None:
            self._config = load_tracker_config(self.config_path)
            if self.stats_path_override is not None:
                self._config.stats_path = self.stats_path_override
        return self._config

    @property
    def lock_path(self) -> Path:
        return self.get_config().stats_path.parent / ".lock"

    def acquire_lock(self):
        """Take the single-writer lock guarding the stats file."""
        acquire_lock(self.lock_path)

    def get_store(self) -> StatsStore:
        """Get or create StatsStore instance."""
        if self._store is None:
            self._store = StatsStore(self.get_config().stats_path)
        return self._store

    def get_engine(self) -> SessionEngine:
        """Get or create SessionEngine instance."""
        if self._engine is None:
            self._engine = SessionEngine(
                store=self.get_store(),
                clock=self.clock,
                ticker=Ticker(self.get_config().tick_interval_seconds),
            )
        return self._engine

    def close(self):
        """Stop background work."""
        if self._engine:
            self._engine.close()

    def __enter__(self) -> ServiceFactory:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
