"""
FileSystem: the minimal file contract the engine relies on.

The engine only ever creates directories, reads and writes whole files,
lists a directory and checks for existence. Implementations raise OSError
(or a subclass) on failure.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """Abstract base for the storage behind reference files."""

    @abstractmethod
    def make_dirs(self, path: Path) -> None:
        """Create *path* and any missing parents; no-op if it exists."""
        ...

    @abstractmethod
    def read_bytes(self, path: Path) -> bytes:
        ...

    @abstractmethod
    def write_bytes(self, path: Path, data: bytes) -> None:
        """Write *data* to *path*, replacing any existing file."""
        ...

    @abstractmethod
    def list_dir(self, path: Path) -> list[Path]:
        """Non-hidden files directly inside *path*."""
        ...

    @abstractmethod
    def exists(self, path: Path) -> bool:
        ...


class LocalFileSystem(FileSystem):
    """The real disk, through pathlib."""

    def make_dirs(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        Path(path).write_bytes(data)

    def list_dir(self, path: Path) -> list[Path]:
        return sorted(
            entry for entry in Path(path).iterdir()
            if entry.is_file() and not entry.name.startswith(".")
        )

    def exists(self, path: Path) -> bool:
        return Path(path).exists()


class InMemoryFileSystem(FileSystem):
    """
    Dict-backed file system for tests.

    Contents are lost when the object is discarded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.files: dict[Path, bytes] = {}
        self.directories: set[Path] = set()

    def make_dirs(self, path: Path) -> None:
        path = Path(path)
        with self._lock:
            if path in self.files:
                raise FileExistsError(f"File exists: '{path}'")
            self.directories.add(path)
            self.directories.update(path.parents)

    def read_bytes(self, path: Path) -> bytes:
        with self._lock:
            try:
                return self.files[Path(path)]
            except KeyError:
                raise FileNotFoundError(f"No such file or directory: '{path}'") from None

    def write_bytes(self, path: Path, data: bytes) -> None:
        path = Path(path)
        with self._lock:
            if path.parent not in self.directories:
                raise FileNotFoundError(f"No such file or directory: '{path}'")
            self.files[path] = bytes(data)

    def list_dir(self, path: Path) -> list[Path]:
        path = Path(path)
        with self._lock:
            if path not in self.directories:
                raise FileNotFoundError(f"No such file or directory: '{path}'")
            return sorted(
                f for f in self.files
                if f.parent == path and not f.name.startswith(".")
            )

    def exists(self, path: Path) -> bool:
        path = Path(path)
        with self._lock:
            return path in self.files or path in self.directories
