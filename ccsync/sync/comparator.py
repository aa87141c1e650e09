"""Freshness policy deciding whether a session file needs copying."""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional

from ..filesystem import EntryMetadata


class SyncAction(str, Enum):
    """Actions that can be taken for a file during sync."""

    COPY = "copy"
    """Copy source file to destination"""

    SKIP = "skip"
    """Skip file (destination is up to date)"""

    FAIL = "fail"
    """File could not be processed"""


@dataclass(frozen=True)
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Path relative to the source root, using forward slashes"""

    source_path: PurePath
    """Full source path"""

    destination_path: Optional[PurePath] = None
    """Full destination path (None if it could not be determined)"""

    size: Optional[int] = None
    """Source file size in bytes, if known"""

    @property
    def is_copy(self) -> bool:
        return self.action is SyncAction.COPY

    @property
    def is_skip(self) -> bool:
        return self.action is SyncAction.SKIP

    @property
    def is_failure(self) -> bool:
        return self.action is SyncAction.FAIL

    def to_dict(self) -> dict:
        """Convert decision to dictionary for JSON serialization."""
        return {
            "action": self.action.value,
            "reason": self.reason,
            "path": self.relative_path,
            "source": str(self.source_path),
            "destination": (
                str(self.destination_path) if self.destination_path else None
            ),
            "size": self.size,
        }


class FileComparator:
    """Compares source and destination metadata to determine sync actions.

    A file is copied if and only if the destination is absent or the source
    modification time is strictly newer. Equal timestamps mean the file is
    up to date.
    """

    def compare(
        self,
        relative_path: str,
        source_path: PurePath,
        destination_path: PurePath,
        source: EntryMetadata,
        destination: Optional[EntryMetadata],
    ) -> SyncDecision:
        """Compare a single file and determine the action.

        Args:
            relative_path: Path relative to the source root
            source_path: Full source path
            destination_path: Full destination path
            source: Source file metadata
            destination: Destination metadata, or None if it does not exist

        Returns:
            SyncDecision for this file
        """
        if destination is None:
            return SyncDecision(
                action=SyncAction.COPY,
                reason="New file",
                relative_path=relative_path,
                source_path=source_path,
                destination_path=destination_path,
                size=source.size,
            )

        if destination.is_dir:
            return SyncDecision(
                action=SyncAction.FAIL,
                reason=f"Destination is a directory: {destination_path}",
                relative_path=relative_path,
                source_path=source_path,
                destination_path=destination_path,
                size=source.size,
            )

        if source.mtime_ns > destination.mtime_ns:
            return SyncDecision(
                action=SyncAction.COPY,
                reason="Source file is newer",
                relative_path=relative_path,
                source_path=source_path,
                destination_path=destination_path,
                size=source.size,
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason="Up to date",
            relative_path=relative_path,
            source_path=source_path,
            destination_path=destination_path,
            size=source.size,
        )

    @staticmethod
    def failure(
        relative_path: str,
        source_path: PurePath,
        reason: str,
        destination_path: Optional[PurePath] = None,
    ) -> SyncDecision:
        """Build a FAIL decision for a file or directory that errored."""
        return SyncDecision(
            action=SyncAction.FAIL,
            reason=reason,
            relative_path=relative_path,
            source_path=source_path,
            destination_path=destination_path,
        )
