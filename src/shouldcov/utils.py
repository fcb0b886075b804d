"""
Utility functions for shouldcov.

src/shouldcov/utils.py
"""

from pathlib import Path
from typing import Optional


def walk_up_for_config(start_path: Path) -> Optional[Path]:
    """
    Find the nearest directory at or above ``start_path`` containing pyproject.toml.

    Args:
        start_path: File or directory to start the search from

    Returns:
        The directory holding pyproject.toml, or None if there is none
    """
    current = start_path.resolve()
    if current.is_file():
        current = current.parent

    for candidate in [current] + list(current.parents):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return None


def get_relative_path(file_path: Path, base_path: Path) -> Path:
    """
    Path of ``file_path`` relative to ``base_path``.

    Raises:
        ValueError: If file_path is not inside base_path
    """
    return file_path.resolve().relative_to(base_path.resolve())
