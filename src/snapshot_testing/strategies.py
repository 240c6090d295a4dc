"""
Built-in snapshot strategies for plain Python values.

- ``lines``: text, compared line by line with a unified diff.
- ``json``: JSON-serializable values, pretty-printed with sorted keys.
- ``dump``: any value, via its ``pprint`` representation.
- ``data``: raw bytes, extensionless reference files.

Build more by pulling one of these back over a conversion::

    as_html = lines.pullback(lambda page: page.to_html())
"""

from __future__ import annotations

import difflib
import json as _json
import pprint
from typing import Any

from snapshot_testing.core.strategy import Attachment, DiffResult, Diffing, Snapshotting


def _diff_lines(reference: str, candidate: str) -> DiffResult:
    if reference == candidate:
        return None
    hunks = difflib.unified_diff(
        reference.splitlines(keepends=True),
        candidate.splitlines(keepends=True),
        fromfile="reference",
        tofile="candidate",
    )
    # Last lines without a newline would otherwise run into the next one.
    patch = "".join(line if line.endswith("\n") else line + "\n" for line in hunks)
    return patch, [Attachment(name="difference.patch", data=patch.encode("utf-8"), content_type="text/x-diff")]


def _diff_data(reference: bytes, candidate: bytes) -> DiffResult:
    if reference == candidate:
        return None
    message = f"Expected data to match: {len(candidate)} bytes != {len(reference)} bytes"
    return message, []


lines_diffing: Diffing[str] = Diffing(
    to_data=lambda text: text.encode("utf-8"),
    from_data=lambda data: data.decode("utf-8"),
    diff=_diff_lines,
)

data_diffing: Diffing[bytes] = Diffing(
    to_data=bytes,
    from_data=bytes,
    diff=_diff_data,
)


def _to_json(value: Any) -> str:
    return _json.dumps(value, indent=2, sort_keys=True, default=str) + "\n"


def _to_dump(value: Any) -> str:
    return pprint.pformat(value, width=100, sort_dicts=True) + "\n"


lines: Snapshotting[str, str] = Snapshotting.from_diffing(lines_diffing, path_extension="txt")

data: Snapshotting[bytes, bytes] = Snapshotting.from_diffing(data_diffing, path_extension=None)

json: Snapshotting[Any, str] = Snapshotting(
    path_extension="json",
    diffing=lines_diffing,
    snapshot=_to_json,
)

dump: Snapshotting[Any, str] = lines.pullback(_to_dump)

__all__ = ["lines", "json", "dump", "data", "lines_diffing", "data_diffing"]
