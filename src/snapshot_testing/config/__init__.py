"""
Configuration module for snapshot-testing.

Provides configuration management including:
- Record mode and diff tool settings
- Failed-artifact directory and render timeout
- Per-platform reference subdirectories
"""

from snapshot_testing.config.settings import (
    DEFAULT_TIMEOUT,
    Platform,
    SnapshotConfig,
    configure,
    get_config,
    load_config_from_env,
    reset_config,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "Platform",
    "SnapshotConfig",
    "configure",
    "get_config",
    "load_config_from_env",
    "reset_config",
]
