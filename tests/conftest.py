"""
Root conftest.py: Shared fixtures for all tests.
"""

import pytest

from snapshot_testing.assertions import set_default_verifier
from snapshot_testing.config.settings import SnapshotConfig, reset_config
from snapshot_testing.core.engine import SnapshotVerifier
from snapshot_testing.core.strategy import Diffing, Snapshotting

pytest_plugins = ["pytester"]

_SNAPSHOT_ENV = (
    "SNAPSHOT_RECORD",
    "SNAPSHOT_DIFF_TOOL",
    "SNAPSHOT_ARTIFACTS",
    "SNAPSHOT_TIMEOUT",
    "SNAPSHOT_PLATFORM",
)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")
    config.addinivalue_line("markers", "integration: tests that drive a nested pytest run")


# ---------------------------------------------------------------------------
# Process-wide state isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_snapshot_state(monkeypatch):
    """Fresh configuration and default verifier for every test."""
    for name in _SNAPSHOT_ENV:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    set_default_verifier(None)
    yield
    reset_config()
    set_default_verifier(None)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def artifacts_dir(tmp_path):
    """Directory receiving failed candidate artifacts."""
    return tmp_path / "artifacts"


@pytest.fixture
def snapshot_config(artifacts_dir) -> SnapshotConfig:
    """Configuration pinned to the linux platform tag and a private artifacts dir."""
    return SnapshotConfig(artifacts_dir=str(artifacts_dir), platform_tag="linux")


@pytest.fixture
def verifier(snapshot_config) -> SnapshotVerifier:
    """A verifier with its own counters and checked registry."""
    return SnapshotVerifier(config=snapshot_config)


@pytest.fixture
def source_file(tmp_path):
    """A fake test module; references land in tmp_path/__Snapshots__/test_widgets/."""
    path = tmp_path / "test_widgets.py"
    path.write_text("")
    return path


@pytest.fixture
def snapshot_dir(tmp_path):
    """Where references of source_file are stored."""
    return tmp_path / "__Snapshots__" / "test_widgets" / "linux"


@pytest.fixture
def text_strategy() -> Snapshotting:
    """Minimal text strategy with a one-line diff message."""
    diffing = Diffing(
        to_data=lambda text: text.encode("utf-8"),
        from_data=lambda data: data.decode("utf-8"),
        diff=lambda old, new: None if old == new else (f"{old!r} != {new!r}\n", []),
    )
    return Snapshotting.from_diffing(diffing, path_extension="txt")
