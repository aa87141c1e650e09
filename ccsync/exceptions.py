"""Custom exceptions for ccsync."""

from pathlib import PurePath
from typing import Optional, Union


class CcsyncError(Exception):
    """Base exception for all ccsync errors."""

    pass


class FileSystemError(CcsyncError):
    """Base exception for filesystem operations.

    Raised by both the real and the in-memory filesystem so that the sync
    engine handles failures identically under either implementation.
    """

    def __init__(
        self, message: str, path: Optional[Union[str, PurePath]] = None
    ) -> None:
        super().__init__(message)
        self.path = path


class PathNotFoundError(FileSystemError):
    """Path does not exist."""

    pass


class NotADirectoryFSError(FileSystemError):
    """A directory operation was attempted on a file."""

    pass


class FileReadError(FileSystemError):
    """Reading a file or its metadata failed."""

    pass


class FileWriteError(FileSystemError):
    """Writing a file, creating a directory or setting a timestamp failed."""

    pass


class FilePermissionError(FileReadError, FileWriteError):
    """Access denied by the underlying system.

    Subclasses both FileReadError and FileWriteError so callers can treat it
    as either.
    """

    pass


class SyncSourceError(CcsyncError):
    """The source root could not be listed; the run cannot proceed."""

    pass


class RepositoryNotFoundError(CcsyncError):
    """No suitable repository directory was found."""

    pass
