"""
Process-wide bookkeeping for snapshot verification.

- CounterStore: per (directory, test name) call counters that number unnamed
  snapshots, and per-directory completeness-audit counters.
- CheckedRegistry: per-directory set of reference files exercised this run.

Tests may run on several threads at once, so each store funnels every
access through its own lock. Increment-and-read is one critical section:
two concurrent callers never observe the same counter value.
"""

from __future__ import annotations

import threading
from pathlib import Path


class CounterStore:
    """
    Monotonic counters keyed by snapshot directory.

    Example:
        counters = CounterStore()
        counters.next_identifier(directory, "test_login")  # 1
        counters.next_identifier(directory, "test_login")  # 2
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: dict[tuple[Path, str], int] = {}
        self._audits: dict[Path, int] = {}

    def next_identifier(self, directory: Path, test_name: str) -> int:
        """Draw the next call index for *test_name* in *directory* (starts at 1)."""
        key = (Path(directory), test_name)
        with self._lock:
            value = self._calls.get(key, 0) + 1
            self._calls[key] = value
            return value

    def increment_audit(self, directory: Path) -> int:
        """Count one more completeness-audit invocation for *directory*."""
        key = Path(directory)
        with self._lock:
            value = self._audits.get(key, 0) + 1
            self._audits[key] = value
            return value

    def reset(self) -> None:
        with self._lock:
            self._calls.clear()
            self._audits.clear()


class CheckedRegistry:
    """Reference files touched (compared or recorded) during this process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._checked: dict[Path, set[Path]] = {}

    def add(self, directory: Path, reference_file: Path) -> None:
        with self._lock:
            self._checked.setdefault(Path(directory), set()).add(Path(reference_file))

    def checked(self, directory: Path) -> frozenset[Path]:
        """Copy of the checked set for *directory* (empty if never touched)."""
        with self._lock:
            return frozenset(self._checked.get(Path(directory), ()))

    def reset(self) -> None:
        with self._lock:
            self._checked.clear()
