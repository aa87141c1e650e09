"""ccsync - Sync Claude Code session files into a git repository."""

from .exceptions import (
    CcsyncError,
    FilePermissionError,
    FileReadError,
    FileSystemError,
    FileWriteError,
    NotADirectoryFSError,
    PathNotFoundError,
    RepositoryNotFoundError,
    SyncSourceError,
)
from .filesystem import FileSystem, MemoryFileSystem, RealFileSystem
from .path_converter import encode, translate
from .sync import SyncAction, SyncDecision, SyncEngine, SyncReport

__all__ = [
    "SyncEngine",
    "SyncReport",
    "SyncDecision",
    "SyncAction",
    "FileSystem",
    "MemoryFileSystem",
    "RealFileSystem",
    "encode",
    "translate",
    "CcsyncError",
    "FileSystemError",
    "PathNotFoundError",
    "NotADirectoryFSError",
    "FileReadError",
    "FileWriteError",
    "FilePermissionError",
    "RepositoryNotFoundError",
    "SyncSourceError",
]
