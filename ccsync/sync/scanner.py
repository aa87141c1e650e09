"""Directory walking for sync operations."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Optional

from ..exceptions import FileSystemError
from ..filesystem import FileSystem

logger = logging.getLogger(__name__)

ScanErrorHandler = Callable[[PurePath, tuple[str, ...], FileSystemError], None]


@dataclass(frozen=True)
class SourceFile:
    """A file found below a project directory during a walk."""

    path: PurePath
    """Full source path"""

    relative_parts: tuple[str, ...]
    """Path segments below the project directory"""


class DirectoryScanner:
    """Recursively walks a directory through a :class:`FileSystem`.

    Examples:
        >>> scanner = DirectoryScanner(MemoryFileSystem())
        >>> files = list(scanner.scan(PurePosixPath("/src/-Users-me-app")))
    """

    def __init__(self, filesystem: FileSystem):
        """Initialize directory scanner.

        Args:
            filesystem: Filesystem to read from
        """
        self.filesystem = filesystem

    def scan(
        self,
        directory: PurePath,
        on_error: Optional[ScanErrorHandler] = None,
    ) -> Iterator[SourceFile]:
        """Yield every file below ``directory``, depth first in name order.

        A directory that cannot be listed is reported to ``on_error`` (or
        logged when no handler is given) and its subtree is skipped; the walk
        continues with its siblings. An error listing ``directory`` itself is
        reported the same way.

        Args:
            directory: Directory to walk
            on_error: Called with (path, relative_parts, error) for each
                directory that cannot be listed

        Yields:
            SourceFile for each file found
        """
        yield from self._scan(directory, (), on_error)

    def _scan(
        self,
        directory: PurePath,
        relative_parts: tuple[str, ...],
        on_error: Optional[ScanErrorHandler],
    ) -> Iterator[SourceFile]:
        try:
            entries = self.filesystem.list_entries(directory)
        except FileSystemError as e:
            if on_error is None:
                logger.warning("Failed to list directory %s: %s", directory, e)
            else:
                on_error(directory, relative_parts, e)
            return

        for entry in entries:
            parts = relative_parts + (entry.name,)
            if entry.is_dir:
                yield from self._scan(entry.path, parts, on_error)
            else:
                yield SourceFile(path=entry.path, relative_parts=parts)
