"""
snapshot-testing - assert that values match references recorded on disk.

This package provides:
- A strategy contract (Snapshotting / Diffing) to render, persist and diff any value
- Deterministic reference locations next to the test file
- Record / compare handling with failed-artifact capture
- A completeness audit for reference files no test exercises
- pytest and unittest integration

Example:
    from snapshot_testing import assert_snapshot, strategies

    def test_greeting():
        assert_snapshot(lambda: greet("Alice"), strategies.lines)

    # First run: records __Snapshots__/test_module/<platform>/test_greeting.1.txt
    # and fails so the new reference gets reviewed. Later runs compare.
"""

__version__ = "0.1.0"
__author__ = "Snapshot Testing Team"

from snapshot_testing import strategies
from snapshot_testing.assertions import (
    assert_all_snapshots_checked,
    assert_snapshot,
    assert_snapshot_async,
    assert_snapshots,
    get_default_verifier,
    set_default_verifier,
    verify_all_snapshots_checked,
    verify_snapshot,
)
from snapshot_testing.config.settings import SnapshotConfig, configure, get_config, reset_config
from snapshot_testing.core.engine import SnapshotOutcome, SnapshotResult, SnapshotVerifier
from snapshot_testing.core.paths import SnapshotLocation, sanitize_path_component
from snapshot_testing.core.strategy import Attachment, Diffing, Snapshotting
from snapshot_testing.exceptions import (
    IntrospectionError,
    RenderFailureError,
    RenderTimeoutError,
    SnapshotAssertionError,
    SnapshotConfigurationError,
    SnapshotError,
)

__all__ = [
    # Version
    "__version__",
    # Assertions
    "assert_snapshot",
    "assert_snapshot_async",
    "assert_snapshots",
    "verify_snapshot",
    "assert_all_snapshots_checked",
    "verify_all_snapshots_checked",
    "get_default_verifier",
    "set_default_verifier",
    # Strategies
    "Snapshotting",
    "Diffing",
    "Attachment",
    "strategies",
    # Engine
    "SnapshotVerifier",
    "SnapshotResult",
    "SnapshotOutcome",
    "SnapshotLocation",
    "sanitize_path_component",
    # Config
    "SnapshotConfig",
    "configure",
    "get_config",
    "reset_config",
    # Errors
    "SnapshotError",
    "SnapshotConfigurationError",
    "RenderTimeoutError",
    "RenderFailureError",
    "IntrospectionError",
    "SnapshotAssertionError",
]
