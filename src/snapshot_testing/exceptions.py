"""
Custom exception hierarchy for snapshot-testing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from snapshot_testing.core.engine import SnapshotResult


class SnapshotError(Exception):
    """Base exception for all snapshot-testing errors."""
    pass


# === Configuration Errors ===

class SnapshotConfigurationError(SnapshotError):
    """Snapshot directory, reference file or artifact could not be accessed."""
    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


# === Render Errors ===

class RenderError(SnapshotError):
    """Base exception for strategy render failures."""
    pass


class RenderTimeoutError(RenderError):
    """The strategy did not produce an artifact in time."""
    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Exceeded timeout of {timeout} seconds waiting for snapshot")


class RenderFailureError(RenderError):
    """The strategy completed without producing an artifact."""
    def __init__(self, message: str = "Couldn't snapshot value"):
        super().__init__(message)


# === Audit Errors ===

class IntrospectionError(SnapshotError):
    """Test methods could not be enumerated for a test class."""
    def __init__(self, test_class: Any):
        self.test_class = test_class
        super().__init__(f"Couldn't find test methods for {describe_class(test_class)}")


# === Assertion Failures ===

class SnapshotAssertionError(AssertionError):
    """
    Raised by the ``assert_*`` entry points when verification fails.

    Being an ``AssertionError``, it is reported as a test failure by pytest
    and unittest alike.
    """

    def __init__(
        self,
        message: str,
        result: SnapshotResult | None = None,
        failures: list[str] | None = None,
    ) -> None:
        self.result = result
        self.failures = failures if failures is not None else [message]
        super().__init__(message)


def describe_class(test_class: Any) -> str:
    """Human-readable name for a test class (or anything passed in its place)."""
    qualname = getattr(test_class, "__qualname__", None)
    if qualname is None:
        return repr(test_class)
    module = getattr(test_class, "__module__", None)
    return f"{module}.{qualname}" if module else qualname


def describe_error(error: BaseException) -> str:
    """Return the error's own description, falling back to its type name."""
    text = str(error).strip()
    return text or type(error).__name__
