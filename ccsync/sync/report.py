"""Sync report accumulating per-file decisions for a single run."""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Optional

from .comparator import SyncAction, SyncDecision


@dataclass(frozen=True)
class ReportWarning:
    """A note about a source entry that was not processed."""

    path: PurePath
    message: str


@dataclass
class SyncReport:
    """Ordered record of what a sync run decided and did.

    The engine appends to the report while walking and calls
    :meth:`finalize` before handing it back; after that it is read-only.
    The same report renders a dry-run preview or a post-run summary, the only
    difference being whether COPY decisions were executed.
    """

    source_root: PurePath
    """Source root that was walked"""

    destination_root: PurePath
    """Destination root files were copied to"""

    dry_run: bool = False
    """Whether COPY decisions were only planned"""

    directories_created: int = 0
    """Number of destination directories created during the run"""

    _decisions: list[SyncDecision] = field(default_factory=list, repr=False)
    _warnings: list[ReportWarning] = field(default_factory=list, repr=False)
    _finalized: bool = field(default=False, repr=False)

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError("Sync report is finalized and cannot be modified")

    def add(self, decision: SyncDecision) -> None:
        """Append a decision."""
        self._check_open()
        self._decisions.append(decision)

    def add_warning(self, path: PurePath, message: str) -> None:
        """Record a warning about an entry that was not processed."""
        self._check_open()
        self._warnings.append(ReportWarning(path=path, message=message))

    def record_directory_created(self) -> None:
        self._check_open()
        self.directories_created += 1

    def finalize(self) -> "SyncReport":
        """Mark the report as complete and return it."""
        self._finalized = True
        return self

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def decisions(self) -> tuple[SyncDecision, ...]:
        """All decisions in the order they were made."""
        return tuple(self._decisions)

    @property
    def warnings(self) -> tuple[ReportWarning, ...]:
        return tuple(self._warnings)

    def _with_action(self, action: SyncAction) -> tuple[SyncDecision, ...]:
        return tuple(d for d in self._decisions if d.action is action)

    @property
    def copied(self) -> tuple[SyncDecision, ...]:
        """Decisions to copy (executed unless this is a dry run)."""
        return self._with_action(SyncAction.COPY)

    @property
    def skipped(self) -> tuple[SyncDecision, ...]:
        return self._with_action(SyncAction.SKIP)

    @property
    def failed(self) -> tuple[SyncDecision, ...]:
        return self._with_action(SyncAction.FAIL)

    @property
    def counts(self) -> dict[str, int]:
        """Number of decisions per action."""
        counts = {action.value: 0 for action in SyncAction}
        for decision in self._decisions:
            counts[decision.action.value] += 1
        return counts

    @property
    def has_failures(self) -> bool:
        return any(d.is_failure for d in self._decisions)

    def find(self, relative_path: str) -> Optional[SyncDecision]:
        """Return the decision for a relative source path, if any."""
        for decision in self._decisions:
            if decision.relative_path == relative_path:
                return decision
        return None

    def to_dict(self) -> dict:
        """Convert report to dictionary for JSON serialization."""
        return {
            "source_root": str(self.source_root),
            "destination_root": str(self.destination_root),
            "dry_run": self.dry_run,
            "counts": self.counts,
            "directories_created": self.directories_created,
            "decisions": [d.to_dict() for d in self._decisions],
            "warnings": [
                {"path": str(w.path), "message": w.message} for w in self._warnings
            ],
        }
