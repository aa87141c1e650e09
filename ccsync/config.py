"""Configuration and repository discovery for ccsync."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from .exceptions import RepositoryNotFoundError

logger = logging.getLogger(__name__)

# Environment variable overriding the default source directory
SOURCE_DIR_ENV_VAR = "CC_SYNC_SESSION_SOURCE_DIR"

# Marker directory inside a repository, relative to the repository root
MARKER_DIR = Path(".claude") / "ccss_sessions"

# Placeholder file created by ``ccsync init`` so git tracks the marker
KEEP_FILE = ".gitkeep"


def default_source_dir() -> Path:
    """Return the directory where Claude Code stores project sessions."""
    return Path.home() / ".claude" / "projects"


def resolve_source_root(
    explicit: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Resolve the source root: explicit value > environment > default.

    Args:
        explicit: Value given on the command line, if any
        environ: Environment to consult (defaults to ``os.environ``)

    Returns:
        Source root directory
    """
    if explicit is not None:
        return Path(explicit)
    env = os.environ if environ is None else environ
    from_env = env.get(SOURCE_DIR_ENV_VAR)
    if from_env:
        return Path(from_env)
    return default_source_dir()


def marker_dir(repo_dir: Path) -> Path:
    """Return the session directory of a repository."""
    return repo_dir / MARKER_DIR


def find_git_repo(start: Path) -> Path:
    """Find the nearest directory at or above ``start`` containing ``.git``.

    Raises:
        RepositoryNotFoundError: If no git repository is found
    """
    for current in (start, *start.parents):
        if (current / ".git").exists():
            return current
    raise RepositoryNotFoundError(
        "No git repository found in current directory or parent directories"
    )


def find_repo_dir(start: Path) -> Path:
    """Find the nearest initialized repository at or above ``start``.

    An initialized repository contains both ``.git`` and the marker
    directory created by ``ccsync init``.

    Raises:
        RepositoryNotFoundError: If no initialized repository is found
    """
    for current in (start, *start.parents):
        has_git = (current / ".git").exists()
        has_marker = marker_dir(current).is_dir()
        logger.debug(
            "Checking directory: %s git: %s, marker: %s", current, has_git, has_marker
        )
        if has_git and has_marker:
            return current
    raise RepositoryNotFoundError(
        f"No repository with {MARKER_DIR.as_posix()} found. "
        "Run 'ccsync init' first"
    )
