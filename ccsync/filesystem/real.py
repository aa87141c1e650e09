"""Filesystem implementation backed by the host operating system."""

import logging
import os
import stat
from pathlib import Path, PurePath
from typing import Optional

from ..exceptions import (
    FilePermissionError,
    FileReadError,
    FileWriteError,
    NotADirectoryFSError,
    PathNotFoundError,
)
from .base import DirEntry, EntryKind, EntryMetadata, FileSystem

logger = logging.getLogger(__name__)


def _entry_kind(item: os.DirEntry) -> Optional[EntryKind]:
    """Return the kind of a scandir entry, or None if it must not be walked.

    Symbolic links to files are followed. Symbolic links to directories are
    skipped, since a link back to an ancestor would otherwise be walked
    forever. A broken link is reported as a file and fails later when its
    metadata is read.
    """
    try:
        if item.is_dir(follow_symlinks=False):
            return EntryKind.DIRECTORY
        if item.is_symlink() and item.is_dir():
            logger.warning("Skipping symlinked directory: %s", item.path)
            return None
    except OSError:
        pass
    return EntryKind.FILE


class RealFileSystem(FileSystem):
    """Thin pass-through to ``os`` and ``pathlib``.

    ``OSError`` subclasses are translated into the ccsync exception
    hierarchy; anything else propagates unchanged. A path whose parent is a
    regular file does not exist, so ``ENOTDIR`` on a lookup is reported as
    :class:`PathNotFoundError`, while listing a file itself is a
    :class:`NotADirectoryFSError`.
    """

    def list_entries(self, path: PurePath) -> list[DirEntry]:
        entries: list[DirEntry] = []
        try:
            with os.scandir(path) as it:
                for item in it:
                    kind = _entry_kind(item)
                    if kind is not None:
                        entries.append(DirEntry(item.name, Path(item.path), kind))
        except FileNotFoundError as e:
            raise PathNotFoundError(f"Not found: {path}", path) from e
        except NotADirectoryError as e:
            if os.path.lexists(path):
                raise NotADirectoryFSError(f"Not a directory: {path}", path) from e
            raise PathNotFoundError(f"Not found: {path}", path) from e
        except PermissionError as e:
            raise FilePermissionError(f"Permission denied: {path}", path) from e
        except OSError as e:
            raise FileReadError(f"Cannot list {path}: {e}", path) from e

        entries.sort(key=lambda entry: entry.name)
        return entries

    def metadata(self, path: PurePath) -> EntryMetadata:
        try:
            st = os.stat(path)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise PathNotFoundError(f"Not found: {path}", path) from e
        except PermissionError as e:
            raise FilePermissionError(f"Permission denied: {path}", path) from e
        except OSError as e:
            raise FileReadError(f"Cannot stat {path}: {e}", path) from e

        kind = EntryKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else EntryKind.FILE
        return EntryMetadata(kind=kind, mtime_ns=st.st_mtime_ns, size=st.st_size)

    def read_file(self, path: PurePath) -> bytes:
        try:
            return Path(path).read_bytes()
        except (FileNotFoundError, NotADirectoryError) as e:
            raise PathNotFoundError(f"Not found: {path}", path) from e
        except PermissionError as e:
            raise FilePermissionError(f"Permission denied: {path}", path) from e
        except OSError as e:
            raise FileReadError(f"Cannot read {path}: {e}", path) from e

    def write_file(self, path: PurePath, data: bytes) -> None:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except PermissionError as e:
            raise FilePermissionError(f"Permission denied: {path}", path) from e
        except OSError as e:
            raise FileWriteError(f"Cannot write {path}: {e}", path) from e
        logger.debug("Wrote %d bytes to %s", len(data), path)

    def create_directory(self, path: PurePath) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise FilePermissionError(f"Permission denied: {path}", path) from e
        except OSError as e:
            raise FileWriteError(f"Cannot create directory {path}: {e}", path) from e

    def set_modified_time(self, path: PurePath, mtime_ns: int) -> None:
        try:
            atime_ns = os.stat(path).st_atime_ns
            os.utime(path, ns=(atime_ns, mtime_ns))
        except PermissionError as e:
            raise FilePermissionError(f"Permission denied: {path}", path) from e
        except (OSError, OverflowError, ValueError) as e:
            raise FileWriteError(
                f"Cannot set modification time of {path}: {e}", path
            ) from e
