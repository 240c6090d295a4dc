"""
Pytest plugin for snapshot-testing.

Register the plugin in your ``conftest.py``:

    pytest_plugins = ["snapshot_testing.testing.fixtures"]

Then use the ``snapshot`` fixture::

    def test_menu(snapshot):
        snapshot.assert_match(render_menu(), strategies.lines)

Command line options:
    --snapshot-record: record every snapshot instead of comparing.
    --snapshot-diff-tool: command shown in mismatch messages, e.g. "ksdiff".

Tests inside a class are named ``<Class>.<test>`` (``TestMenus-test_file.1.txt``
on disk), so equally named tests of different classes never share references.

Completeness audit, run after each test::

    class TestMenus:
        @pytest.fixture(autouse=True)
        def _all_snapshots_checked(self, snapshot):
            yield
            snapshot.assert_all_checked()

References are stored per test module, so the audit is per module too: the
directory is listed once every collected test of the module that uses the
``snapshot`` fixture has called ``assert_all_checked``. Tests deselected with
``-k`` or ``-m`` are part of that count, so a filtered run never reports.

Requires: pytest (optional dependency).
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any

import pytest

from snapshot_testing.assertions import get_default_verifier
from snapshot_testing.core.audit import CompletenessAuditor
from snapshot_testing.core.engine import SnapshotResult, SnapshotVerifier
from snapshot_testing.core.strategy import Attachment, Snapshotting
from snapshot_testing.exceptions import SnapshotAssertionError, SnapshotConfigurationError, describe_error

_MODULE_COUNTS_KEY = pytest.StashKey[Counter]()
_ATTACHMENTS_KEY = pytest.StashKey[list]()


def pytest_addoption(parser):
    group = parser.getgroup("snapshot-testing")
    group.addoption(
        "--snapshot-record",
        action="store_true",
        default=False,
        help="Record every snapshot instead of comparing against references.",
    )
    group.addoption(
        "--snapshot-diff-tool",
        default=None,
        help="Diff command included in snapshot mismatch messages (e.g. ksdiff).",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(session, config, items):
    # Runs before -k / -m deselection.
    config.stash[_MODULE_COUNTS_KEY] = Counter(
        Path(item.path) for item in items if "snapshot" in getattr(item, "fixturenames", ())
    )


def snapshot_test_name(request) -> str:
    """``Class.test`` for tests in a class, the plain node name otherwise."""
    if request.cls is not None:
        return f"{request.cls.__qualname__}.{request.node.name}"
    return request.node.name


class SnapshotFixture:
    """
    Snapshot assertions bound to one pytest test.

    Attributes:
        test_name: Class-qualified node name, e.g. ``TestMenus.test_menu[dark]``.
        source_file: The test module's path.
        audit_total: Collected tests of the module using the fixture.
        attachments: Attachments collected from mismatching snapshots.
    """

    def __init__(
        self,
        verifier: SnapshotVerifier,
        test_name: str,
        source_file: Path,
        audit_scope: Any = None,
        record: bool = False,
        diff_tool: str | None = None,
        audit_total: int | None = None,
        attachments: list[Attachment] | None = None,
    ) -> None:
        self.verifier = verifier
        self.test_name = test_name
        self.source_file = source_file
        self.audit_scope = audit_scope
        self.record = record
        self.diff_tool = diff_tool
        self.audit_total = audit_total
        self.attachments = attachments if attachments is not None else []

    def check(
        self,
        value: Any,
        snapshotting: Snapshotting,
        name: str | None = None,
        record: bool = False,
        timeout: float | None = None,
    ) -> SnapshotResult:
        return self.verifier.check(
            value,
            snapshotting,
            name=name,
            record=record or self.record,
            timeout=timeout,
            test_name=self.test_name,
            source_file=self.source_file,
            diff_tool=self.diff_tool,
            attachment_sink=self.attachments.extend,
        )

    def verify(self, value: Any, snapshotting: Snapshotting, name: str | None = None,
               record: bool = False, timeout: float | None = None) -> str | None:
        """Return the failure message, or None if *value* matches."""
        return self.check(value, snapshotting, name=name, record=record, timeout=timeout).message

    def assert_match(self, value: Any, snapshotting: Snapshotting, name: str | None = None,
                     record: bool = False, timeout: float | None = None) -> None:
        result = self.check(value, snapshotting, name=name, record=record, timeout=timeout)
        if not result.passed:
            raise SnapshotAssertionError(result.message or "Snapshot verification failed", result=result)

    def assert_all_checked(self) -> None:
        """Completeness audit for this test's module; call from every test's teardown."""
        try:
            platform_tag = self.verifier.config.platform_tag
        except SnapshotConfigurationError as exc:
            raise SnapshotAssertionError(describe_error(exc)) from exc

        auditor = CompletenessAuditor(
            self.verifier.filesystem,
            self.verifier.counters,
            self.verifier.checked,
            test_method_counter=lambda scope: self.audit_total,
        )
        message = auditor.audit_if_last(self.audit_scope, self.source_file, platform_tag)
        if message is not None:
            raise SnapshotAssertionError(message)


@pytest.fixture
def snapshot(request) -> SnapshotFixture:
    """Provide snapshot assertions bound to the requesting test."""
    attachments: list[Attachment] = []
    request.node.stash[_ATTACHMENTS_KEY] = attachments
    source_file = Path(request.node.path)
    module_counts = request.config.stash.get(_MODULE_COUNTS_KEY, None)
    return SnapshotFixture(
        verifier=get_default_verifier(),
        test_name=snapshot_test_name(request),
        source_file=source_file,
        audit_scope=request.module,
        record=request.config.getoption("snapshot_record"),
        diff_tool=request.config.getoption("snapshot_diff_tool"),
        audit_total=module_counts.get(source_file) if module_counts is not None else None,
        attachments=attachments,
    )


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    attachments = item.stash.get(_ATTACHMENTS_KEY, None)
    if report.when == "call" and report.failed and attachments:
        for attachment in attachments:
            try:
                body = attachment.data.decode("utf-8")
            except UnicodeDecodeError:
                body = f"<{len(attachment.data)} bytes, {attachment.content_type}>"
            report.sections.append((f"snapshot attachment: {attachment.name}", body))
