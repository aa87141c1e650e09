"""In-memory filesystem for deterministic tests.

Examples:
    >>> fs = MemoryFileSystem()
    >>> fs.add_file("/src/-Users-me-app/session.json", b"{}", mtime_ns=10)
    >>> [e.name for e in fs.list_entries(PurePosixPath("/src"))]
    ['-Users-me-app']
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePath, PurePosixPath
from typing import Callable, Optional, Union

from ..exceptions import (
    FilePermissionError,
    FileReadError,
    FileWriteError,
    NotADirectoryFSError,
    PathNotFoundError,
)
from .base import DirEntry, EntryKind, EntryMetadata, FileSystem

PathLike = Union[str, PurePath]

ROOT = PurePosixPath("/")


@dataclass
class MemoryFile:
    """A file stored in a :class:`MemoryFileSystem`."""

    content: bytes
    mtime_ns: int


def _key(path: PathLike) -> PurePosixPath:
    return PurePosixPath(PurePath(path).as_posix())


def _lineage(path: PurePosixPath) -> list[PurePosixPath]:
    """Return ``path`` and all its ancestors, outermost first."""
    return [*reversed(path.parents), path]


class MemoryFileSystem(FileSystem):
    """A simulated directory tree that never touches the disk.

    Each operation validates every precondition before changing anything,
    so a failing call leaves the tree untouched. Failures the host
    filesystem would produce (unreadable files, full disks, permission
    problems) can be injected per path with :meth:`fail_read`,
    :meth:`fail_write` and :meth:`deny`.

    Every mutating call made through the :class:`FileSystem` interface is
    appended to :attr:`mutations` as ``(operation, path)``.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        """Initialize an empty tree containing only the root directory.

        Args:
            clock: Returns the current time in nanoseconds; used as the
                modification time of written files (defaults to
                ``time.time_ns``)
        """
        self._clock = clock or time.time_ns
        self._dirs: dict[PurePosixPath, int] = {ROOT: 0}
        self._files: dict[PurePosixPath, MemoryFile] = {}
        self._failing_reads: set[PurePosixPath] = set()
        self._failing_writes: set[PurePosixPath] = set()
        self._denied: set[PurePosixPath] = set()
        self.mutations: list[tuple[str, PurePosixPath]] = []

    # ------------------------------------------------------------------
    # Test helpers (not part of the FileSystem interface)
    # ------------------------------------------------------------------

    def add_directory(self, path: PathLike, mtime_ns: int = 0) -> None:
        """Create a directory and any missing parents."""
        key = _key(path)
        for ancestor in _lineage(key):
            if ancestor in self._files:
                raise ValueError(f"{ancestor} is a file")
            self._dirs.setdefault(ancestor, mtime_ns)

    def add_file(self, path: PathLike, content: bytes = b"", mtime_ns: int = 0) -> None:
        """Create or replace a file, creating missing parent directories."""
        key = _key(path)
        if key in self._dirs:
            raise ValueError(f"{key} is a directory")
        self.add_directory(key.parent)
        self._files[key] = MemoryFile(content=content, mtime_ns=mtime_ns)

    def get_file(self, path: PathLike) -> Optional[MemoryFile]:
        """Return the stored file or None if there is no file at ``path``."""
        return self._files.get(_key(path))

    def exists(self, path: PathLike) -> bool:
        key = _key(path)
        return key in self._files or key in self._dirs

    def is_dir(self, path: PathLike) -> bool:
        return _key(path) in self._dirs

    def snapshot(self, root: PathLike = ROOT) -> dict[str, tuple[bytes, int]]:
        """Return ``{path: (content, mtime_ns)}`` for every file below ``root``."""
        base = _key(root)
        return {
            str(path): (stored.content, stored.mtime_ns)
            for path, stored in sorted(self._files.items())
            if path == base or base in path.parents
        }

    def fail_read(self, path: PathLike) -> None:
        """Make reading ``path`` raise FileReadError."""
        self._failing_reads.add(_key(path))

    def fail_write(self, path: PathLike) -> None:
        """Make any write at or below ``path`` raise FileWriteError."""
        self._failing_writes.add(_key(path))

    def deny(self, path: PathLike) -> None:
        """Make any access below ``path`` raise FilePermissionError.

        ``path`` itself can still be inspected with :meth:`metadata`, as with
        a directory whose search permission was removed.
        """
        self._denied.add(_key(path))

    # ------------------------------------------------------------------
    # Failure checks
    # ------------------------------------------------------------------

    def _check_denied(self, key: PurePosixPath) -> None:
        for ancestor in _lineage(key):
            if ancestor in self._denied:
                raise FilePermissionError(f"Permission denied: {key}", key)

    def _check_writable(self, key: PurePosixPath) -> None:
        self._check_denied(key)
        for ancestor in _lineage(key):
            if ancestor in self._failing_writes:
                raise FileWriteError(f"Cannot write {key}: simulated I/O error", key)
        for ancestor in key.parents:
            if ancestor in self._files:
                raise FileWriteError(
                    f"Cannot write {key}: {ancestor} is not a directory", key
                )

    # ------------------------------------------------------------------
    # FileSystem interface
    # ------------------------------------------------------------------

    def list_entries(self, path: PurePath) -> list[DirEntry]:
        key = _key(path)
        if key in self._files:
            raise NotADirectoryFSError(f"Not a directory: {key}", key)
        if key not in self._dirs:
            raise PathNotFoundError(f"Not found: {key}", key)
        self._check_denied(key)

        entries = [
            DirEntry(child.name, child, EntryKind.DIRECTORY)
            for child in self._dirs
            if child != key and child.parent == key
        ]
        entries.extend(
            DirEntry(child.name, child, EntryKind.FILE)
            for child in self._files
            if child.parent == key
        )
        entries.sort(key=lambda entry: entry.name)
        return entries

    def metadata(self, path: PurePath) -> EntryMetadata:
        key = _key(path)
        if key != ROOT:
            # A denied directory can still be stat-ed; its contents cannot.
            self._check_denied(key.parent)
        if key in self._files:
            stored = self._files[key]
            return EntryMetadata(
                kind=EntryKind.FILE, mtime_ns=stored.mtime_ns, size=len(stored.content)
            )
        if key in self._dirs:
            return EntryMetadata(
                kind=EntryKind.DIRECTORY, mtime_ns=self._dirs[key], size=0
            )
        raise PathNotFoundError(f"Not found: {key}", key)

    def read_file(self, path: PurePath) -> bytes:
        key = _key(path)
        if key in self._dirs:
            raise FileReadError(f"Cannot read {key}: is a directory", key)
        if key not in self._files:
            raise PathNotFoundError(f"Not found: {key}", key)
        self._check_denied(key)
        if key in self._failing_reads:
            raise FileReadError(f"Cannot read {key}: simulated I/O error", key)
        return self._files[key].content

    def write_file(self, path: PurePath, data: bytes) -> None:
        key = _key(path)
        self._check_writable(key)
        if key in self._dirs:
            raise FileWriteError(f"Cannot write {key}: is a directory", key)

        mtime_ns = self._clock()
        self._create_lineage(key.parent, mtime_ns)
        self._files[key] = MemoryFile(content=bytes(data), mtime_ns=mtime_ns)
        self.mutations.append(("write_file", key))

    def create_directory(self, path: PurePath) -> None:
        key = _key(path)
        self._check_writable(key)
        if key in self._files:
            raise FileWriteError(f"Cannot create directory {key}: file exists", key)

        self._create_lineage(key, self._clock())
        self.mutations.append(("create_directory", key))

    def set_modified_time(self, path: PurePath, mtime_ns: int) -> None:
        key = _key(path)
        if key not in self._files and key not in self._dirs:
            raise FileWriteError(
                f"Cannot set modification time of {key}: not found", key
            )
        self._check_writable(key)

        if key in self._files:
            self._files[key].mtime_ns = mtime_ns
        else:
            self._dirs[key] = mtime_ns
        self.mutations.append(("set_modified_time", key))

    def _create_lineage(self, key: PurePosixPath, mtime_ns: int) -> None:
        for ancestor in _lineage(key):
            self._dirs.setdefault(ancestor, mtime_ns)

    def mutated_paths(self) -> Iterable[PurePosixPath]:
        """Return every path passed to a mutating operation."""
        return [path for _, path in self.mutations]
