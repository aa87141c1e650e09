"""Core sync engine for copying session files into a repository."""

import logging
import time
from collections.abc import Collection
from pathlib import PurePath
from typing import Callable, Optional, Union

from ..exceptions import (
    FileSystemError,
    FileWriteError,
    PathNotFoundError,
    SyncSourceError,
)
from ..filesystem import EntryMetadata, FileSystem
from ..path_converter import destination_parts, translate
from .comparator import FileComparator, SyncAction, SyncDecision
from .report import SyncReport
from .scanner import DirectoryScanner, SourceFile

logger = logging.getLogger(__name__)

DecisionCallback = Callable[[SyncDecision], None]


def _as_path(value: Union[str, PurePath]) -> PurePath:
    return value if isinstance(value, PurePath) else PurePath(value)


class SyncEngine:
    """One-way sync from a Claude Code projects directory to a repository.

    Every top-level directory of the source root is an encoded project path
    (see :func:`ccsync.path_converter.translate`). Its files are mirrored
    below the decoded path in the destination; everything below the first
    segment is copied verbatim.
    """

    def __init__(
        self,
        filesystem: FileSystem,
        comparator: Optional[FileComparator] = None,
    ):
        """Initialize sync engine.

        Args:
            filesystem: Filesystem used for every read and write
            comparator: Freshness policy (defaults to FileComparator)
        """
        self.filesystem = filesystem
        self.comparator = comparator or FileComparator()
        self.scanner = DirectoryScanner(filesystem)

    def sync(
        self,
        source_root: Union[str, PurePath],
        destination_root: Union[str, PurePath],
        dry_run: bool = False,
        projects: Optional[Collection[str]] = None,
        on_decision: Optional[DecisionCallback] = None,
    ) -> SyncReport:
        """Sync every project directory below ``source_root``.

        Args:
            source_root: Directory containing encoded project directories
            destination_root: Directory receiving the decoded tree
            dry_run: If True, only decide; never touch the filesystem
            projects: If given, only these encoded project names are synced
            on_decision: Called with each decision as soon as it is recorded

        Returns:
            Finalized SyncReport

        Raises:
            SyncSourceError: If the source root cannot be listed

        Examples:
            >>> engine = SyncEngine(RealFileSystem())
            >>> report = engine.sync(source, repo / ".claude/ccss_sessions")
            >>> print(f"Copied {len(report.copied)} file(s)")
        """
        source_root = _as_path(source_root)
        destination_root = _as_path(destination_root)
        start_time = time.time()

        report = SyncReport(
            source_root=source_root,
            destination_root=destination_root,
            dry_run=dry_run,
        )

        try:
            top_entries = self.filesystem.list_entries(source_root)
        except FileSystemError as e:
            raise SyncSourceError(f"Cannot list source root {source_root}: {e}") from e

        known_dirs: set[PurePath] = set()

        for entry in top_entries:
            if projects is not None and entry.name not in projects:
                continue
            if not entry.is_dir:
                logger.info("Skipping non-directory entry: %s", entry.path)
                report.add_warning(entry.path, "Not a project directory")
                continue

            parts = destination_parts(translate(entry.name))
            prefix = destination_root.joinpath(*parts)
            logger.debug("Project %s -> %s", entry.name, prefix)

            def on_scan_error(
                path: PurePath,
                parts: tuple[str, ...],
                error: FileSystemError,
                project: str = entry.name,
            ) -> None:
                decision = self.comparator.failure(
                    relative_path="/".join((project,) + parts),
                    source_path=path,
                    reason=f"Cannot list directory: {error}",
                )
                self._record(report, decision, on_decision)

            for source_file in self.scanner.scan(entry.path, on_error=on_scan_error):
                decision = self._process_file(
                    entry.name,
                    source_file,
                    prefix,
                    source_root,
                    destination_root,
                    report,
                    known_dirs,
                    dry_run,
                )
                self._record(report, decision, on_decision)

        elapsed = time.time() - start_time
        logger.debug(
            "Sync of %s took %.2fs: %s", source_root, elapsed, report.counts
        )
        return report.finalize()

    def _record(
        self,
        report: SyncReport,
        decision: SyncDecision,
        on_decision: Optional[DecisionCallback],
    ) -> None:
        if decision.action is SyncAction.FAIL:
            logger.info("Failed %s: %s", decision.relative_path, decision.reason)
        else:
            logger.debug(
                "%s %s (%s)",
                decision.action.value,
                decision.relative_path,
                decision.reason,
            )
        report.add(decision)
        if on_decision is not None:
            on_decision(decision)

    def _process_file(
        self,
        project: str,
        source_file: SourceFile,
        prefix: PurePath,
        source_root: PurePath,
        destination_root: PurePath,
        report: SyncReport,
        known_dirs: set[PurePath],
        dry_run: bool,
    ) -> SyncDecision:
        """Decide on a single file and execute the copy if needed.

        Filesystem errors are converted into a FAIL decision so one file
        never aborts the run.
        """
        relative_path = "/".join((project,) + source_file.relative_parts)
        destination_path = prefix.joinpath(*source_file.relative_parts)

        try:
            source_meta = self.filesystem.metadata(source_file.path)
            destination_meta = self._destination_metadata(destination_path)
            decision = self.comparator.compare(
                relative_path,
                source_file.path,
                destination_path,
                source_meta,
                destination_meta,
            )
            if decision.action is SyncAction.COPY and not dry_run:
                self._copy(
                    source_file.path,
                    destination_path,
                    source_meta,
                    source_root,
                    destination_root,
                    report,
                    known_dirs,
                )
        except FileSystemError as e:
            return self.comparator.failure(
                relative_path=relative_path,
                source_path=source_file.path,
                reason=str(e),
                destination_path=destination_path,
            )

        return decision

    def _destination_metadata(self, path: PurePath) -> Optional[EntryMetadata]:
        try:
            return self.filesystem.metadata(path)
        except PathNotFoundError:
            return None

    def _copy(
        self,
        source_path: PurePath,
        destination_path: PurePath,
        source_meta: EntryMetadata,
        source_root: PurePath,
        destination_root: PurePath,
        report: SyncReport,
        known_dirs: set[PurePath],
    ) -> None:
        """Copy one file and give the copy the source's modification time."""
        self._check_not_source(destination_path, source_root)
        self._ensure_directory(
            destination_path.parent, source_root, destination_root, report, known_dirs
        )

        data = self.filesystem.read_file(source_path)
        self.filesystem.write_file(destination_path, data)
        # mtime observed before the read; a source modified mid-copy is
        # therefore newer than the copy and gets picked up next run.
        self.filesystem.set_modified_time(destination_path, source_meta.mtime_ns)
        logger.debug("Copied %s -> %s", source_path, destination_path)

    def _ensure_directory(
        self,
        directory: PurePath,
        source_root: PurePath,
        destination_root: PurePath,
        report: SyncReport,
        known_dirs: set[PurePath],
    ) -> None:
        """Create ``directory`` and its missing ancestors, counting each one."""
        if directory in known_dirs:
            return

        missing: list[PurePath] = []
        current = directory
        while True:
            try:
                meta = self.filesystem.metadata(current)
            except PathNotFoundError:
                missing.append(current)
                if current == destination_root or current.parent == current:
                    break
                current = current.parent
                continue
            if not meta.is_dir:
                raise FileWriteError(f"Not a directory: {current}", current)
            break

        for path in reversed(missing):
            self._check_not_source(path, source_root)
            self.filesystem.create_directory(path)
            report.record_directory_created()
            logger.debug("Created directory: %s", path)

        known_dirs.add(directory)

    @staticmethod
    def _check_not_source(path: PurePath, source_root: PurePath) -> None:
        if path == source_root or source_root in path.parents:
            raise FileWriteError(f"Refusing to write inside source root: {path}", path)
