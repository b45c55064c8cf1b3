"""Directory listing for the scan root"""

import os

from logging_config import LibraryScanError, get_logger

logger = get_logger("library")


def list_entries(path, sort=False, show_hidden=True):
    """List the immediate entries of *path*

    Args:
        path: Directory to list (not recursed into)
        sort: Sort names case-insensitively instead of keeping filesystem order
        show_hidden: Keep names starting with a dot

    Returns:
        list: Entry names (files and directories)

    Raises:
        LibraryScanError: If the directory is missing or unreadable
    """
    try:
        names = os.listdir(path)
    except OSError as e:
        logger.warning(f"Cannot list {path}: {e}")
        raise LibraryScanError(f"Cannot read {path}: {e.strerror or e}") from e

    if not show_hidden:
        names = [name for name in names if not name.startswith(".")]
    if sort:
        names.sort(key=str.lower)

    logger.debug(f"Listed {len(names)} entries in {path}")
    return names
