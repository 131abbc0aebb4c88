"""
Utility functions for safe filenames and paths.
"""

import re
from pathlib import Path

from .constants import MAX_FILENAME_LENGTH, UNTITLED_PAGE


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a title for use as a file or directory name.

    Args:
        filename: Title to sanitize

    Returns:
        Safe file name, never empty
    """
    if not filename:
        return UNTITLED_PAGE

    # Remove dangerous characters
    sanitized = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", filename)
    sanitized = re.sub(r"\s+", " ", sanitized)
    # No hidden files
    sanitized = re.sub(r"^\.+", "_", sanitized)

    return sanitized.strip()[:MAX_FILENAME_LENGTH] or UNTITLED_PAGE


def safe_path_join(base_path, *paths) -> Path:
    """
    Join paths under a base directory, preventing path traversal.

    Args:
        base_path: Base directory
        paths: Relative parts to join

    Returns:
        Resolved path inside the base directory

    Raises:
        ValueError: If the resulting path escapes the base directory
    """
    base = Path(base_path).resolve()
    result = base.joinpath(*paths).resolve()

    try:
        result.relative_to(base)
    except ValueError:
        raise ValueError(f"Unsafe path detected: {result}")

    return result
