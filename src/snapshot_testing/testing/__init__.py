"""
Test-framework integration for snapshot-testing.

- ``snapshot_testing.testing.fixtures``: pytest plugin with a ``snapshot``
  fixture (import it through ``pytest_plugins``; needs pytest).
- ``snapshot_testing.testing.testcase``: ``SnapshotTestCase`` for unittest.
"""

from snapshot_testing.testing.testcase import SnapshotTestCase

__all__ = ["SnapshotTestCase"]
