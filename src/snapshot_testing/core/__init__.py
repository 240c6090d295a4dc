"""
Core of snapshot-testing: strategy contract, path allocation, shared
bookkeeping, verification engine and completeness audit.
"""

from snapshot_testing.core.strategy import Attachment, Diffing, Snapshotting
from snapshot_testing.core.paths import PathAllocator, SnapshotLocation, sanitize_path_component
from snapshot_testing.core.store import CheckedRegistry, CounterStore
from snapshot_testing.core.filesystem import FileSystem, InMemoryFileSystem, LocalFileSystem
from snapshot_testing.core.audit import CompletenessAuditor, count_test_methods
from snapshot_testing.core.engine import SnapshotOutcome, SnapshotResult, SnapshotVerifier

__all__ = [
    "Attachment",
    "CheckedRegistry",
    "CompletenessAuditor",
    "CounterStore",
    "Diffing",
    "FileSystem",
    "InMemoryFileSystem",
    "LocalFileSystem",
    "PathAllocator",
    "SnapshotLocation",
    "SnapshotOutcome",
    "SnapshotResult",
    "SnapshotVerifier",
    "Snapshotting",
    "count_test_methods",
    "sanitize_path_component",
]
