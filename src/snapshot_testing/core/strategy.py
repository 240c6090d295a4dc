"""
The strategy contract consumed by the verification engine.

A ``Snapshotting[Value, Format]`` turns a value into a comparable artifact
(the "format"), and its ``Diffing[Format]`` moves that artifact to and from
bytes and compares two of them. The engine never looks inside either: any
object with this shape can be snapshotted.

Example::

    text = Diffing(
        to_data=lambda s: s.encode("utf-8"),
        from_data=lambda b: b.decode("utf-8"),
        diff=lambda old, new: None if old == new else ("Text differs", []),
    )
    as_text = Snapshotting.from_diffing(text, path_extension="txt")
    as_upper = as_text.pullback(lambda s: s.upper())
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, Tuple, TypeVar

Value = TypeVar("Value")
Format = TypeVar("Format")
NewValue = TypeVar("NewValue")


@dataclass(frozen=True)
class Attachment:
    """Auxiliary failure artifact handed to the host's rich reporting untouched."""
    name: str
    data: bytes
    content_type: str = "application/octet-stream"


# None when the two artifacts are equivalent, else (message, attachments).
DiffResult = Optional[Tuple[str, List[Attachment]]]


@dataclass
class Diffing(Generic[Format]):
    """
    Serialization and comparison of one artifact format.

    ``from_data(to_data(x))`` must diff as equal to ``x``; otherwise every
    comparison against a stored reference reports drift.

    Attributes:
        to_data: Serialize an artifact for persistence.
        from_data: Restore an artifact from persisted bytes.
        diff: Compare (reference, candidate). Equivalence is strategy policy,
            it need not mean byte equality.
    """
    to_data: Callable[[Format], bytes]
    from_data: Callable[[bytes], Format]
    diff: Callable[[Format, Format], DiffResult]


@dataclass
class Snapshotting(Generic[Value, Format]):
    """
    How to snapshot values of one type.

    Attributes:
        path_extension: Extension of reference files, or None for none.
        diffing: Serialization and comparison of the rendered artifact.
        snapshot: Render a value. May return the artifact, an awaitable
            resolving to it, or a ``concurrent.futures.Future``. ``None``
            means nothing could be rendered.
    """
    path_extension: Optional[str]
    diffing: Diffing[Format]
    snapshot: Callable[[Value], Any] = field(repr=False)

    @classmethod
    def from_diffing(cls, diffing: Diffing[Format], path_extension: Optional[str] = None) -> "Snapshotting[Format, Format]":
        """Strategy whose values already are artifacts."""
        return cls(path_extension=path_extension, diffing=diffing, snapshot=_identity)

    def render(self, value: Value) -> Any:
        return self.snapshot(value)

    def pullback(self, transform: Callable[[NewValue], Value]) -> "Snapshotting[NewValue, Format]":
        """Snapshot another type by first converting it with *transform*."""
        snapshot = self.snapshot

        def _snapshot(value: NewValue) -> Any:
            return snapshot(transform(value))

        return Snapshotting(path_extension=self.path_extension, diffing=self.diffing, snapshot=_snapshot)

    def async_pullback(self, transform: Callable[[NewValue], Awaitable[Value]]) -> "Snapshotting[NewValue, Format]":
        """Like :meth:`pullback`, for a coroutine *transform*."""
        snapshot = self.snapshot

        async def _snapshot(value: NewValue) -> Any:
            rendered = snapshot(await transform(value))
            if inspect.isawaitable(rendered):
                rendered = await rendered
            return rendered

        return Snapshotting(path_extension=self.path_extension, diffing=self.diffing, snapshot=_snapshot)


def _identity(value: Any) -> Any:
    return value
