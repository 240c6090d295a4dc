"""
Reference file locations.

Layout::

    <test dir>/__Snapshots__/<test file stem>[/<platform>]/<test name>.<identifier>[.<ext>]

The identifier is either a sanitized explicit name, stable across runs, or
the call index of an unnamed snapshot within its test. Call indexes are only
stable while the order of calls in the test does not change.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from snapshot_testing.core.store import CounterStore

logger = logging.getLogger(__name__)

SNAPSHOTS_DIRNAME = "__Snapshots__"

_NON_WORD = re.compile(r"\W+")
_EDGE_DASH = re.compile(r"^-|-$")


def sanitize_path_component(text: str) -> str:
    """
    Make *text* safe to use inside a file name.

    Runs of non-word characters collapse to a single ``-`` and a leading or
    trailing ``-`` is dropped::

        >>> sanitize_path_component("foo bar!!baz")
        'foo-bar-baz'
        >>> sanitize_path_component("???")
        ''
    """
    return _EDGE_DASH.sub("", _NON_WORD.sub("-", text))


@dataclass(frozen=True)
class SnapshotLocation:
    """Where a single snapshot lives on disk."""
    directory: Path
    reference_file: Path
    base_file_name: str

    @property
    def file_name(self) -> str:
        return self.reference_file.name


def snapshot_directory(source_file: str | Path, platform_tag: str | None = None) -> tuple[Path, str]:
    """
    Directory holding the references of *source_file*, and the file's stem.
    """
    source = Path(source_file)
    base_file_name = source.stem
    directory = source.parent / SNAPSHOTS_DIRNAME / base_file_name
    if platform_tag:
        directory = directory / platform_tag
    return directory, base_file_name


class PathAllocator:
    """
    Maps a call site to its reference file.

    Unnamed snapshots draw their identifier from the shared CounterStore, so
    repeated calls within one test get ``1``, ``2``, ``3``...
    """

    def __init__(self, counters: CounterStore, platform_tag: str | None = None) -> None:
        self.counters = counters
        self.platform_tag = platform_tag

    def resolve(
        self,
        source_file: str | Path,
        name: str | None,
        test_name: str,
        path_extension: str | None,
    ) -> SnapshotLocation:
        directory, base_file_name = snapshot_directory(source_file, self.platform_tag)
        safe_test_name = sanitize_path_component(test_name)

        if name is not None:
            identifier = sanitize_path_component(name)
        else:
            identifier = str(self.counters.next_identifier(directory, safe_test_name))

        file_name = f"{safe_test_name}.{identifier}"
        if path_extension:
            file_name = f"{file_name}.{path_extension}"

        location = SnapshotLocation(
            directory=directory,
            reference_file=directory / file_name,
            base_file_name=base_file_name,
        )
        logger.debug("Resolved snapshot for %s to %s", test_name, location.reference_file)
        return location
