"""Filesystem locking helpers.

The stats file has a single writer: every command that builds an engine holds
this lock for the rest of the process.
"""

from __future__ import annotations

import atexit
import contextlib
import os
import sys
import time
from pathlib import Path
from typing import Optional

from filelock import FileLock as FileLocker, Timeout as FileLockTimeout

from ..constants import LOCK_PATH, console

_lock_acquired: Optional["FileLock"] = None


class FileLock:
    """Cross-platform file-based lock that records the holder's PID."""

    def __init__(self, lock_path: Path = LOCK_PATH):
        self.lock_path = lock_path
        self.pid_path = lock_path.with_suffix(".pid")
        self.lock = FileLocker(str(lock_path), timeout=-1)
        self.acquired = False

    def acquire(self, timeout: float = 30):
        """Acquire exclusive lock, waiting up to timeout seconds."""
        start_time = time.time()
        shown_waiting_msg = False

        self.lock_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

        while True:
            try:
                self.lock.acquire(timeout=0.001)
                self.acquired = True
                self._write_pid()
                if shown_waiting_msg:
                    console.print("[green]✓ Lock acquired[/green]")
                return

            except FileLockTimeout:
                if time.time() - start_time >= timeout:
                    pid_info = self._read_pid()
                    holder = f" (PID: {pid_info})" if pid_info else ""
                    console.print(
                        f"[red]Error: Timeout waiting for another claudetracker process{holder} to finish[/red]"
                    )
                    sys.exit(1)

                if not shown_waiting_msg:
                    pid_info = self._read_pid()
                    holder = f" (PID: {pid_info})" if pid_info else ""
                    console.print(f"[yellow]Waiting for another claudetracker process{holder}...[/yellow]")
                    shown_waiting_msg = True

                time.sleep(0.1)

    def _write_pid(self):
        try:
            fd = os.open(self.pid_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as handle:
                handle.write(f"{os.getpid()}\n")
        except OSError:
            pass

    def _read_pid(self) -> Optional[str]:
        """Read PID from lock file for diagnostics."""
        try:
            return self.pid_path.read_text().strip() or None
        except OSError:
            return None

    def release(self):
        """Release the lock."""
        if not self.acquired:
            return
        self.lock.release()
        self.acquired = False
        with contextlib.suppress(OSError):
            self.pid_path.unlink()


def release_lock():
    global _lock_acquired
    if _lock_acquired is not None:
        _lock_acquired.release()
        _lock_acquired = None


def acquire_lock(lock_path: Path = LOCK_PATH, timeout: float = 30):
    """Acquire the process-wide lock (idempotent for the same path)."""
    global _lock_acquired
    if _lock_acquired is not None:
        if _lock_acquired.lock_path == lock_path:
            return
        release_lock()

    lock = FileLock(lock_path)
    lock.acquire(timeout=timeout)
    _lock_acquired = lock


atexit.register(release_lock)
