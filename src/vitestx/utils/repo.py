"""Project root detection for Node.js projects."""

from __future__ import annotations

import logging
from pathlib import Path

from vitestx.errors import ProjectNotFoundError

PROJECT_MARKER = "package.json"

logger = logging.getLogger(__name__)


def _has_marker(directory: Path) -> bool:
    try:
        return (directory / PROJECT_MARKER).is_file()
    except OSError:
        return False


def find_project_root(start: Path | str | None) -> Path | None:
    """
    Find the nearest ancestor directory (inclusive) containing package.json.

    A file path is searched from its containing directory. The walk stops at
    the filesystem root, whose parent is itself.

    Args:
        start: File or directory to start from; None short-circuits

    Returns:
        Path to the project root, or None if not found
    """
    if start is None:
        return None

    current = Path(start).expanduser().absolute()
    if not current.is_dir():
        current = current.parent

    while True:
        if _has_marker(current):
            logger.debug("project root for %s: %s", start, current)
            return current

        # Move up one level
        parent = current.parent
        if parent == current:
            logger.debug("no %s above %s", PROJECT_MARKER, start)
            return None

        current = parent


def require_project_root(start: Path | str | None) -> Path:
    """
    Find the project root or raise an error with a helpful message.

    Raises:
        ProjectNotFoundError: If no ancestor holds package.json
    """
    root = find_project_root(start)

    if root is None:
        raise ProjectNotFoundError(
            f"No Node.js project found. Started at: {start}\n"
            f"Checked marker: {PROJECT_MARKER}\n"
            "To fix: run from inside a project, or pass a path below one."
        )

    return root


def relative_to_root(target: Path | str, root: Path | str) -> str:
    """Return target relative to root in POSIX form, or target unchanged if outside it."""
    target_path = Path(target)
    if not target_path.is_absolute():
        return target_path.as_posix()
    try:
        return target_path.relative_to(Path(root)).as_posix()
    except ValueError:
        return target_path.as_posix()
