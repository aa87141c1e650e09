"""Conversion between filesystem paths and Claude Code project directory names.

Claude Code stores the sessions of a project under a single directory whose
name is the project's absolute path with every ``/`` (and ``.``) replaced by
``-``. For example ``/Users/yuta/project`` is stored as
``-Users-yuta-project``.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Union

SEPARATOR = "-"


def encode(dir_path: Union[str, Path]) -> str:
    """Encode an absolute directory path the way Claude Code names projects.

    Args:
        dir_path: Absolute path of a directory

    Returns:
        Encoded project directory name

    Raises:
        ValueError: If the path is relative or points to a file

    Examples:
        >>> encode("/path/to")
        '-path-to'
        >>> encode("/path/to/github.com")
        '-path-to-github-com'
    """
    path = Path(dir_path)
    if not path.is_absolute():
        raise ValueError(f"Path must be absolute: {dir_path}")
    if path.is_file():
        raise ValueError(f"Path must be a directory, not a file: {dir_path}")

    without_root = path.as_posix().lstrip("/")
    return SEPARATOR + without_root.replace("/", SEPARATOR).replace(".", SEPARATOR)


def translate(encoded_name: str) -> list[str]:
    """Translate an encoded project directory name into path segments.

    One leading separator (standing for the root ``/``) is dropped and the
    remainder is split on every separator. Empty segments produced by
    consecutive separators are kept; ``--a`` yields ``["", "a"]``. Encoding
    maps ``.`` to ``-`` as well, so ``/home/me/.config`` arrives as
    ``-home-me--config`` and the original dot cannot be recovered.

    Args:
        encoded_name: A single top-level directory name from the source root

    Returns:
        List of path segments (never empty)

    Examples:
        >>> translate("-Users-yuta-project")
        ['Users', 'yuta', 'project']
        >>> translate("project")
        ['project']
    """
    if encoded_name.startswith(SEPARATOR):
        encoded_name = encoded_name[len(SEPARATOR) :]
    return encoded_name.split(SEPARATOR)


def destination_parts(segments: Iterable[str]) -> list[str]:
    """Return the segments usable as path components.

    Empty segments cannot be represented in a filesystem path, so they are
    dropped here rather than in :func:`translate`.

    Args:
        segments: Segments returned by :func:`translate`

    Returns:
        Non-empty segments in order
    """
    return [segment for segment in segments if segment]
