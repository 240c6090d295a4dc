"""
Configuration settings for snapshot-testing.

This module provides configuration management through environment variables
and programmatic configuration.
"""

import os
import sys
import tempfile
import threading
from typing import Optional
from dataclasses import dataclass, field, replace
from enum import Enum
import logging

from snapshot_testing.exceptions import SnapshotConfigurationError

logger = logging.getLogger(__name__)

# Try to load dotenv if available
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass


DEFAULT_TIMEOUT = 5.0


class Platform(str, Enum):
    """Execution platforms that get their own reference subdirectory."""
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"

    @classmethod
    def current_tag(cls) -> str:
        """Tag for the running interpreter's platform (raw ``sys.platform`` if unknown)."""
        if sys.platform.startswith("linux"):
            return cls.LINUX.value
        if sys.platform == "darwin":
            return cls.MACOS.value
        if sys.platform in ("win32", "cygwin"):
            return cls.WINDOWS.value
        return sys.platform


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_timeout(name: str) -> float:
    raw = os.getenv(name, str(DEFAULT_TIMEOUT))
    try:
        timeout = float(raw)
    except ValueError:
        raise SnapshotConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from None
    if timeout <= 0:
        raise SnapshotConfigurationError(f"{name} must be positive, got {raw!r}")
    return timeout


@dataclass
class SnapshotConfig:
    """
    Process-wide settings read by the verification engine.

    Settings are read (never written) while assertions run, so set them once
    at startup, e.g. in ``conftest.py``.

    Example:
        >>> # Load from environment
        >>> config = SnapshotConfig.from_env()
        >>>
        >>> # Programmatic configuration
        >>> configure(record=True, diff_tool="ksdiff")

    Environment Variables:
        SNAPSHOT_RECORD: Record every snapshot instead of comparing ("true"/"false")
        SNAPSHOT_DIFF_TOOL: Command shown in mismatch messages, e.g. "ksdiff"
        SNAPSHOT_ARTIFACTS: Directory for failed candidate artifacts
        SNAPSHOT_TIMEOUT: Default render timeout in seconds
        SNAPSHOT_PLATFORM: Per-platform subdirectory name (empty disables it)
        LOG_LEVEL: Logging level used by configure_logging()
    """
    record: bool = False
    diff_tool: Optional[str] = None
    artifacts_dir: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    platform_tag: Optional[str] = field(default_factory=Platform.current_tag)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "SnapshotConfig":
        """Load configuration from environment variables."""
        return cls(
            record=_env_flag("SNAPSHOT_RECORD"),
            diff_tool=os.getenv("SNAPSHOT_DIFF_TOOL") or None,
            artifacts_dir=os.getenv("SNAPSHOT_ARTIFACTS") or None,
            timeout=_env_timeout("SNAPSHOT_TIMEOUT"),
            platform_tag=os.getenv("SNAPSHOT_PLATFORM", Platform.current_tag()) or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def resolve_artifacts_dir(self) -> str:
        """Directory that receives failed candidates; falls back to the temp dir."""
        return self.artifacts_dir or os.getenv("SNAPSHOT_ARTIFACTS") or tempfile.gettempdir()

    def configure_logging(self):
        """Configure logging based on settings."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )


_config: Optional[SnapshotConfig] = None
_config_lock = threading.Lock()


def get_config() -> SnapshotConfig:
    """Return the process-wide configuration, loading it from the environment on first use."""
    global _config
    with _config_lock:
        if _config is None:
            _config = SnapshotConfig.from_env()
        return _config


def configure(**overrides) -> SnapshotConfig:
    """
    Update the process-wide configuration.

    Example:
        configure(record=True)
    """
    global _config
    current = get_config()
    with _config_lock:
        _config = replace(current, **overrides)
        logger.debug("Snapshot configuration updated: %s", sorted(overrides))
        return _config


def reset_config() -> None:
    """Drop the process-wide configuration; the next get_config() reloads it."""
    global _config
    with _config_lock:
        _config = None


def load_config_from_env() -> SnapshotConfig:
    """
    Convenience function to load configuration from environment.

    Returns:
        SnapshotConfig loaded from environment variables
    """
    return SnapshotConfig.from_env()
