"""
Assertion entry points for test code.

Each function defaults ``test_name`` and ``source_file`` to the calling
function and its file, so a plain call inside a test is enough::

    def test_invoice():
        assert_snapshot(lambda: render_invoice(order), strategies.lines)

``assert_*`` functions raise :class:`SnapshotAssertionError` (an
``AssertionError``); ``verify_*`` functions return the failure message or
None so custom assertions can be built on top.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

from snapshot_testing.core.engine import SnapshotResult, SnapshotVerifier
from snapshot_testing.core.strategy import Snapshotting
from snapshot_testing.exceptions import SnapshotAssertionError

logger = logging.getLogger(__name__)

Strategies = Union[Mapping[str, Snapshotting], Sequence[Snapshotting]]

_default_verifier: SnapshotVerifier | None = None
_verifier_lock = threading.Lock()


def get_default_verifier() -> SnapshotVerifier:
    """The process-wide verifier behind the module-level API."""
    global _default_verifier
    with _verifier_lock:
        if _default_verifier is None:
            _default_verifier = SnapshotVerifier()
        return _default_verifier


def set_default_verifier(verifier: SnapshotVerifier | None) -> None:
    """Replace the process-wide verifier (None: build a fresh one on next use)."""
    global _default_verifier
    with _verifier_lock:
        _default_verifier = verifier


def _call_site(depth: int) -> tuple[str, str]:
    """(file, function name) of the frame *depth* levels above the caller."""
    frame = sys._getframe(depth + 1)
    return frame.f_code.co_filename, frame.f_code.co_name


def _check(
    value: Any,
    snapshotting: Snapshotting,
    name: str | None,
    record: bool,
    timeout: float | None,
    test_name: str,
    source_file: str | Path,
) -> SnapshotResult:
    return get_default_verifier().check(
        value,
        snapshotting,
        name=name,
        record=record,
        timeout=timeout,
        test_name=test_name,
        source_file=source_file,
    )


def verify_snapshot(
    value: Any,
    snapshotting: Snapshotting,
    name: str | None = None,
    record: bool = False,
    timeout: float | None = None,
    test_name: str | None = None,
    source_file: str | Path | None = None,
) -> str | None:
    """
    Verify that *value* matches its reference on disk.

    Args:
        value: The value, or a zero-argument callable producing it. Any
            callable is invoked, so to snapshot a function or a class itself
            wrap it: ``lambda: my_function``.
        snapshotting: Strategy used to render, persist and diff the value.
        name: Optional snapshot name; unnamed snapshots are numbered per test.
        record: Record a new reference instead of comparing.
        timeout: Seconds the strategy may take to render (default from config).
        test_name: Defaults to the calling function's name.
        source_file: Defaults to the calling function's file.

    Returns:
        A failure message, or None if the value matches.
    """
    if test_name is None or source_file is None:
        caller_file, caller_name = _call_site(1)
        test_name = test_name or caller_name
        source_file = source_file or caller_file
    return _check(value, snapshotting, name, record, timeout, test_name, source_file).message


def assert_snapshot(
    value: Any,
    snapshotting: Snapshotting,
    name: str | None = None,
    record: bool = False,
    timeout: float | None = None,
    test_name: str | None = None,
    source_file: str | Path | None = None,
) -> None:
    """Assert that *value* matches its reference; see :func:`verify_snapshot`."""
    if test_name is None or source_file is None:
        caller_file, caller_name = _call_site(1)
        test_name = test_name or caller_name
        source_file = source_file or caller_file
    result = _check(value, snapshotting, name, record, timeout, test_name, source_file)
    if not result.passed:
        raise SnapshotAssertionError(result.message or "Snapshot verification failed", result=result)


def assert_snapshots(
    value: Any,
    strategies: Strategies,
    record: bool = False,
    timeout: float | None = None,
    test_name: str | None = None,
    source_file: str | Path | None = None,
) -> None:
    """
    Assert *value* against several strategies.

    *strategies* is either a mapping of snapshot name to strategy or a list
    of strategies (numbered like unnamed snapshots). Every strategy runs even
    if an earlier one fails; all failures are reported together.
    """
    if test_name is None or source_file is None:
        caller_file, caller_name = _call_site(1)
        test_name = test_name or caller_name
        source_file = source_file or caller_file

    if isinstance(strategies, Mapping):
        labelled = [(name, name, strategy) for name, strategy in strategies.items()]
    else:
        labelled = [(str(index), None, strategy) for index, strategy in enumerate(strategies, start=1)]

    failures: list[str] = []
    for label, name, strategy in labelled:
        result = _check(value, strategy, name, record, timeout, test_name, source_file)
        if not result.passed:
            failures.append(f"[{label}] {result.message}")

    if failures:
        raise SnapshotAssertionError("\n\n".join(failures), failures=failures)


async def assert_snapshot_async(
    value: Any,
    snapshotting: Snapshotting,
    name: str | None = None,
    record: bool = False,
    timeout: float | None = None,
    test_name: str | None = None,
    source_file: str | Path | None = None,
) -> None:
    """
    Async form of :func:`assert_snapshot` for coroutine tests.

    Verification runs in a worker thread so the test's event loop keeps
    running while the strategy renders.
    """
    if test_name is None or source_file is None:
        caller_file, caller_name = _call_site(1)
        test_name = test_name or caller_name
        source_file = source_file or caller_file
    result = await asyncio.to_thread(
        _check, value, snapshotting, name, record, timeout, test_name, source_file,
    )
    if not result.passed:
        raise SnapshotAssertionError(result.message or "Snapshot verification failed", result=result)


def verify_all_snapshots_checked(test_class: Any, source_file: str | Path | None = None) -> str | None:
    """
    Completeness audit for *test_class*; call from each test's teardown.

    Returns the list of unexercised reference files once the last test of
    the class has torn down, otherwise None.
    """
    if source_file is None:
        source_file, _ = _call_site(1)
    return get_default_verifier().verify_all_checked(test_class, source_file)


def assert_all_snapshots_checked(test_class: Any, source_file: str | Path | None = None) -> None:
    """Fail if references in *test_class*'s snapshot directory went unexercised."""
    if source_file is None:
        source_file, _ = _call_site(1)
    message = get_default_verifier().verify_all_checked(test_class, source_file)
    if message is not None:
        raise SnapshotAssertionError(message)
