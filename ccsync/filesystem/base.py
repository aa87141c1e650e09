"""Filesystem interface used by the sync engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath


class EntryKind(str, Enum):
    """Kind of a filesystem entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirEntry:
    """An entry returned by :meth:`FileSystem.list_entries`."""

    name: str
    """Entry name (last path component)"""

    path: PurePath
    """Full path of the entry"""

    kind: EntryKind
    """Whether the entry is a file or a directory"""

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True)
class EntryMetadata:
    """Metadata of a single filesystem entry."""

    kind: EntryKind
    """Whether the entry is a file or a directory"""

    mtime_ns: int
    """Last modification time in nanoseconds since the epoch"""

    size: int
    """Size in bytes (informational only)"""

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class FileSystem(ABC):
    """Abstract interface for the filesystem operations the sync engine needs.

    Implementations raise the exceptions from :mod:`ccsync.exceptions`:

    - ``PathNotFoundError`` when a path does not exist
    - ``NotADirectoryFSError`` when listing a file
    - ``FileReadError`` / ``FileWriteError`` on underlying I/O failures
    - ``FilePermissionError`` when access is denied

    Every implementation must raise the same exception for the same
    precondition violation, so engine behavior does not depend on which one
    is in use.
    """

    @abstractmethod
    def list_entries(self, path: PurePath) -> list[DirEntry]:
        """List the entries of a directory, sorted by name.

        Raises:
            PathNotFoundError: If the path does not exist
            NotADirectoryFSError: If the path is a file
        """
        raise NotImplementedError

    @abstractmethod
    def metadata(self, path: PurePath) -> EntryMetadata:
        """Return metadata for a path.

        Raises:
            PathNotFoundError: If the path does not exist
        """
        raise NotImplementedError

    @abstractmethod
    def read_file(self, path: PurePath) -> bytes:
        """Read the full content of a file.

        Raises:
            PathNotFoundError: If the path does not exist
            FileReadError: If the file cannot be read
        """
        raise NotImplementedError

    @abstractmethod
    def write_file(self, path: PurePath, data: bytes) -> None:
        """Write a file, creating parent directories as needed.

        Raises:
            FileWriteError: If the file cannot be written
        """
        raise NotImplementedError

    @abstractmethod
    def create_directory(self, path: PurePath) -> None:
        """Create a directory and its parents. Existing directories are fine.

        Raises:
            FileWriteError: If the directory cannot be created
        """
        raise NotImplementedError

    @abstractmethod
    def set_modified_time(self, path: PurePath, mtime_ns: int) -> None:
        """Set the modification time of an existing path.

        Raises:
            FileWriteError: If the path does not exist or the time is rejected
        """
        raise NotImplementedError
