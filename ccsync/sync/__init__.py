"""Sync engine for ccsync - one-way session file sync."""

from .comparator import FileComparator, SyncAction, SyncDecision
from .engine import SyncEngine
from .report import ReportWarning, SyncReport
from .scanner import DirectoryScanner, SourceFile

__all__ = [
    "SyncEngine",
    "SyncReport",
    "ReportWarning",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "DirectoryScanner",
    "SourceFile",
]
