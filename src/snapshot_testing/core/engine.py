"""
Snapshot verification engine.

One call to :meth:`SnapshotVerifier.check` runs a single assertion:

1. resolve the reference location and make sure its directory exists,
2. mark the reference as checked for the completeness audit,
3. evaluate the value and render it, waiting at most ``timeout`` seconds,
4. record the artifact (record mode, or no reference yet) or compare it
   against the stored reference,
5. on mismatch, keep the candidate in the artifacts directory.

Every error along the way is turned into a failure message; nothing raised
by a strategy or the file system escapes a single assertion.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence

from snapshot_testing.config.settings import SnapshotConfig, get_config
from snapshot_testing.core.audit import CompletenessAuditor, TestMethodCounter
from snapshot_testing.core.filesystem import FileSystem, LocalFileSystem
from snapshot_testing.core.paths import PathAllocator, SnapshotLocation
from snapshot_testing.core.store import CheckedRegistry, CounterStore
from snapshot_testing.core.strategy import Attachment, Snapshotting
from snapshot_testing.exceptions import (
    RenderFailureError,
    RenderTimeoutError,
    SnapshotConfigurationError,
    describe_error,
)

logger = logging.getLogger(__name__)

MINUS = "−"
PLUS = "+"

AttachmentSink = Callable[[Sequence[Attachment]], None]


class SnapshotOutcome(str, Enum):
    PASSED = "passed"
    RECORDED = "recorded"
    MISMATCH = "mismatch"
    FAILED = "failed"


@dataclass
class SnapshotResult:
    """
    Outcome of a single snapshot assertion.

    Attributes:
        outcome: What happened.
        message: Failure message; None only when the snapshot matched.
        location: Resolved reference location, if resolution got that far.
        failed_path: Where the mismatching candidate was written.
        attachments: Attachments produced by the strategy's diff.
    """
    outcome: SnapshotOutcome
    message: str | None = None
    location: SnapshotLocation | None = None
    failed_path: Path | None = None
    attachments: list[Attachment] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome == SnapshotOutcome.PASSED


def _log_attachments(attachments: Sequence[Attachment]) -> None:
    logger.info("Snapshot failure attachments: %s", ", ".join(a.name for a in attachments))


async def _resolve(awaitable: Any) -> Any:
    return await awaitable


class _RenderTask:
    """
    Renders a value on a daemon thread.

    A task whose wait timed out is simply abandoned: its result lands on
    this object only, which nothing reads any more.
    """

    def __init__(self, snapshotting: Snapshotting, value: Any) -> None:
        self._done = threading.Event()
        self._result: Any = None
        self._error: BaseException | None = None
        self._thread = threading.Thread(
            target=self._run,
            args=(snapshotting, value),
            name="snapshot-render",
            daemon=True,
        )

    def start(self) -> "_RenderTask":
        self._thread.start()
        return self

    def _run(self, snapshotting: Snapshotting, value: Any) -> None:
        try:
            rendered = snapshotting.render(value)
            if inspect.isawaitable(rendered):
                rendered = asyncio.run(_resolve(rendered))
            elif isinstance(rendered, concurrent.futures.Future):
                rendered = rendered.result()
            self._result = rendered
        except Exception as exc:
            self._error = exc
        finally:
            self._done.set()

    def wait(self, timeout: float) -> Any:
        if not self._done.wait(timeout):
            raise RenderTimeoutError(timeout)
        if self._error is not None:
            raise self._error
        if self._result is None:
            raise RenderFailureError()
        return self._result


class SnapshotVerifier:
    """
    Runs snapshot assertions against references on disk.

    A verifier owns the bookkeeping shared by all assertions of a run (call
    counters, checked references, audit counters). The module-level API uses
    one process-wide instance; tests of the engine itself build their own.

    Args:
        config: Fixed configuration. When omitted, the process-wide
            configuration is read on every call.
        filesystem: Storage for references and failed artifacts.
        counters: Call and audit counters.
        checked: Registry of exercised references.
        attachment_sink: Receives diff attachments on mismatch.
        test_method_counter: Introspection used by the completeness audit.

    Example:
        verifier = SnapshotVerifier()
        message = verifier.verify(
            lambda: render_page(), strategies.lines,
            test_name="test_page", source_file=__file__,
        )
        assert message is None, message
    """

    def __init__(
        self,
        config: SnapshotConfig | None = None,
        filesystem: FileSystem | None = None,
        counters: CounterStore | None = None,
        checked: CheckedRegistry | None = None,
        attachment_sink: AttachmentSink | None = None,
        test_method_counter: TestMethodCounter | None = None,
    ) -> None:
        self._config = config
        self.filesystem = filesystem or LocalFileSystem()
        self.counters = counters or CounterStore()
        self.checked = checked or CheckedRegistry()
        self.attachment_sink = attachment_sink or _log_attachments
        self.auditor = CompletenessAuditor(
            self.filesystem, self.counters, self.checked, test_method_counter,
        )

    @property
    def config(self) -> SnapshotConfig:
        return self._config if self._config is not None else get_config()

    def reset(self) -> None:
        """Forget all counters and checked references."""
        self.counters.reset()
        self.checked.reset()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def verify(
        self,
        value: Any,
        snapshotting: Snapshotting,
        name: str | None = None,
        record: bool = False,
        timeout: float | None = None,
        *,
        test_name: str,
        source_file: str | Path,
        diff_tool: str | None = None,
        attachment_sink: AttachmentSink | None = None,
    ) -> str | None:
        """Return a failure message, or None if the value matches its reference."""
        return self.check(
            value,
            snapshotting,
            name=name,
            record=record,
            timeout=timeout,
            test_name=test_name,
            source_file=source_file,
            diff_tool=diff_tool,
            attachment_sink=attachment_sink,
        ).message

    def check(
        self,
        value: Any,
        snapshotting: Snapshotting,
        name: str | None = None,
        record: bool = False,
        timeout: float | None = None,
        *,
        test_name: str,
        source_file: str | Path,
        diff_tool: str | None = None,
        attachment_sink: AttachmentSink | None = None,
    ) -> SnapshotResult:
        """
        Verify *value* against its reference and describe the outcome.

        *value* is a zero-argument callable producing the value (called at
        most once, after the location is set up) or the value itself. Every
        callable is treated as such a thunk.
        *record* and *diff_tool* add to / override the configured settings
        for this call only.
        """
        location = None
        try:
            config = self.config
            recording = record or config.record
            timeout = config.timeout if timeout is None else timeout
            diff_tool = diff_tool if diff_tool is not None else config.diff_tool

            allocator = PathAllocator(self.counters, config.platform_tag)
            location = allocator.resolve(source_file, name, test_name, snapshotting.path_extension)
            self.filesystem.make_dirs(location.directory)
            self.checked.add(location.directory, location.reference_file)

            produced = value() if callable(value) else value
            rendered = _RenderTask(snapshotting, produced).start().wait(timeout)

            if recording or not self.filesystem.exists(location.reference_file):
                return self._record(snapshotting, rendered, location, test_name, recording)
            return self._compare(
                snapshotting, rendered, location, config, diff_tool,
                attachment_sink or self.attachment_sink,
            )
        except Exception as exc:
            logger.debug("Snapshot assertion in %s failed: %s", test_name, exc)
            return SnapshotResult(
                outcome=SnapshotOutcome.FAILED,
                message=describe_error(exc),
                location=location,
            )

    def verify_all_checked(self, test_class: Any, source_file: str | Path) -> str | None:
        """Completeness audit for *test_class*; see :class:`CompletenessAuditor`."""
        try:
            platform_tag = self.config.platform_tag
        except SnapshotConfigurationError as exc:
            return describe_error(exc)
        return self.auditor.audit_if_last(test_class, source_file, platform_tag)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _record(
        self,
        snapshotting: Snapshotting,
        rendered: Any,
        location: SnapshotLocation,
        test_name: str,
        recording: bool,
    ) -> SnapshotResult:
        diffing = snapshotting.diffing
        reference_file = location.reference_file

        previous_diff = None
        if recording and self.filesystem.exists(reference_file):
            try:
                previous = diffing.from_data(self.filesystem.read_bytes(reference_file))
                previous_diff = diffing.diff(previous, rendered)
            except Exception as exc:
                logger.debug("Could not diff against previous reference %s: %s", reference_file, exc)

        self.filesystem.write_bytes(reference_file, diffing.to_data(rendered))
        logger.info("Recorded snapshot %s", reference_file)

        if recording:
            diff_message = previous_diff[0].strip() if previous_diff else "Recorded snapshot: …"
            message = (
                f'Record mode is on. Turn record mode off and re-run "{test_name}" '
                f"to test against the newly-recorded snapshot.\n\n"
                f'open "{reference_file}"\n\n'
                f"{diff_message}"
            )
        else:
            message = (
                "No reference was found on disk. Automatically recorded snapshot: …\n\n"
                f'open "{reference_file}"\n\n'
                f'Re-run "{test_name}" to test against the newly-recorded snapshot.'
            )
        return SnapshotResult(outcome=SnapshotOutcome.RECORDED, message=message, location=location)

    def _compare(
        self,
        snapshotting: Snapshotting,
        rendered: Any,
        location: SnapshotLocation,
        config: SnapshotConfig,
        diff_tool: str | None,
        attachment_sink: AttachmentSink,
    ) -> SnapshotResult:
        diffing = snapshotting.diffing
        reference_file = location.reference_file

        reference = diffing.from_data(self.filesystem.read_bytes(reference_file))
        difference = diffing.diff(reference, rendered)
        if difference is None:
            return SnapshotResult(outcome=SnapshotOutcome.PASSED, location=location)

        failure, attachments = difference
        artifacts_dir = Path(config.resolve_artifacts_dir()) / location.base_file_name
        self.filesystem.make_dirs(artifacts_dir)
        failed_path = artifacts_dir / location.file_name
        self.filesystem.write_bytes(failed_path, diffing.to_data(rendered))
        logger.warning("Snapshot %s does not match; candidate written to %s", reference_file, failed_path)

        if attachments:
            attachment_sink(list(attachments))

        if diff_tool:
            paths = f'{diff_tool} "{reference_file}" "{failed_path}"'
        else:
            paths = f'@{MINUS}\n"{reference_file}"\n@{PLUS}\n"{failed_path}"'
        message = f"Snapshot does not match reference.\n\n{paths}\n\n{failure.strip()}"
        return SnapshotResult(
            outcome=SnapshotOutcome.MISMATCH,
            message=message,
            location=location,
            failed_path=failed_path,
            attachments=list(attachments),
        )
