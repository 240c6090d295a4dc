"""
Completeness audit: flag reference files that no test exercised.

Call it once per test teardown. Only the call that brings the directory's
audit counter up to the number of test methods in the class actually lists
the directory, so a run filtered down to a few tests reports nothing instead
of flagging the references of tests that never ran.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from snapshot_testing.core.filesystem import FileSystem
from snapshot_testing.core.paths import snapshot_directory
from snapshot_testing.core.store import CheckedRegistry, CounterStore
from snapshot_testing.exceptions import IntrospectionError, describe_error

logger = logging.getLogger(__name__)

TestMethodCounter = Callable[[Any], Optional[int]]


def count_test_methods(test_class: Any) -> int:
    """Number of callable attributes named ``test*`` on *test_class*."""
    if not isinstance(test_class, type):
        raise IntrospectionError(test_class)
    return sum(
        1 for attr in dir(test_class)
        if attr.startswith("test") and callable(getattr(test_class, attr, None))
    )


class CompletenessAuditor:
    """
    Reports orphaned references for a test class.

    Args:
        filesystem: Where reference directories are listed.
        counters: Holds the per-directory audit counters.
        checked: References exercised so far in this process.
        test_method_counter: Host-specific introspection returning how many
            tests the class runs. ``None`` or an exception means the class
            could not be introspected.
    """

    def __init__(
        self,
        filesystem: FileSystem,
        counters: CounterStore,
        checked: CheckedRegistry,
        test_method_counter: TestMethodCounter | None = None,
    ) -> None:
        self.filesystem = filesystem
        self.counters = counters
        self.checked = checked
        self.count_test_methods = test_method_counter or count_test_methods

    def audit_if_last(
        self,
        test_class: Any,
        source_file: str | Path,
        platform_tag: str | None = None,
    ) -> str | None:
        """Return a failure message, or None when nothing is (yet) unchecked."""
        try:
            test_count = self.count_test_methods(test_class)
        except IntrospectionError as exc:
            return str(exc)
        except Exception as exc:
            logger.debug("Introspection of %r failed: %s", test_class, exc)
            return f"{IntrospectionError(test_class)}: {describe_error(exc)}"
        if test_count is None:
            return str(IntrospectionError(test_class))

        directory, _ = snapshot_directory(source_file, platform_tag)
        counter = self.counters.increment_audit(directory)
        if counter != test_count:
            logger.debug("Audit of %s deferred (%d/%d)", directory, counter, test_count)
            return None

        try:
            present = self.filesystem.list_dir(directory)
        except Exception as exc:
            return describe_error(exc)

        checked = self.checked.checked(directory)
        unchecked = sorted(path for path in present if path not in checked)
        if not unchecked:
            logger.debug("All %d snapshots in %s were checked", len(present), directory)
            return None
        return "These files were not checked:\n" + "\n".join(str(path) for path in unchecked)
