"""
Module for writing converted documents to the output tree.
"""

from pathlib import Path

from .exceptions import ConversionError
from .security import safe_path_join


def write_output_file(output_dir, relative_path, content: str) -> Path:
    """
    Write content under the output directory, creating parent directories.

    Returns:
        Path: the written file
    """
    full_path = safe_path_join(output_dir, relative_path)
    try:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        with open(full_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise ConversionError(f"Error writing {full_path}: {e}") from e
    return full_path
