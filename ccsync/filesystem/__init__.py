"""Filesystem abstraction with a real and an in-memory implementation."""

from .base import DirEntry, EntryKind, EntryMetadata, FileSystem
from .memory import MemoryFile, MemoryFileSystem
from .real import RealFileSystem

__all__ = [
    "DirEntry",
    "EntryKind",
    "EntryMetadata",
    "FileSystem",
    "MemoryFile",
    "MemoryFileSystem",
    "RealFileSystem",
]
