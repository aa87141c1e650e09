"""Utility functions for ccsync."""

from typing import Optional

# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: Optional[int]) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes (None if unknown)

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B", "-")
    """
    if size_bytes is None:
        return "-"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def pluralize(count: int, noun: str) -> str:
    """Return ``"<count> <noun>(s)"`` the way summaries print counts.

    Examples:
        >>> pluralize(1, "file")
        '1 file'
        >>> pluralize(3, "file")
        '3 files'
    """
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
