"""
File discovery routines for shouldcov.

Uses pathlib glob/rglob based on include patterns from pyproject.toml, then
filters results using exclude patterns. Discovered files are split into
source modules (checked for ``@should`` coverage) and test modules (indexed
as candidate backing test classes).

shouldcov/discovery.py
"""

import fnmatch
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Set

from .config import Config
from .utils import get_relative_path

__all__ = ["DiscoveredFiles", "discover_files", "matches_any"]
logger = logging.getLogger(__name__)

_SKIPPED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".tox",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    "node_modules",
}


@dataclass
class DiscoveredFiles:
    """Files found under a project root, as absolute paths."""

    sources: List[Path] = field(default_factory=list)
    tests: List[Path] = field(default_factory=list)


def matches_any(rel_path: str, patterns: Sequence[str]) -> bool:
    """fnmatch ``rel_path`` against glob patterns; ``**/`` also matches zero directories."""
    for pattern in patterns:
        normalized = pattern.replace("\\", "/")
        if fnmatch.fnmatch(rel_path, normalized):
            return True
        if "**/" in normalized and fnmatch.fnmatch(rel_path, normalized.replace("**/", "")):
            return True
    return False


def _relative(file_path: Path, project_root: Path) -> Optional[str]:
    try:
        return str(get_relative_path(file_path, project_root)).replace("\\", "/")
    except ValueError:
        logger.warning(f"Path {file_path} is outside project root {project_root}. Excluding.")
        return None


def _within_targets(file_path: Path, targets: List[Path]) -> bool:
    return any(file_path == target or target in file_path.parents for target in targets)


def discover_files(config: Config, paths: Optional[List[Path]] = None) -> DiscoveredFiles:
    """
    Discover source and test modules of the project.

    Test modules are always collected from the whole project so that backing
    test classes can be found. Source modules are limited to ``paths`` when
    given.

    Args:
    config: The shouldcov configuration object (must have project_root set).
    paths: Files or directories whose source modules should be checked.

    Returns:
    DiscoveredFiles with sorted, unique absolute paths.

    Raises:
    ValueError: If config.project_root is None.
    """
    if config.project_root is None:
        raise ValueError("Cannot discover files without a project root defined in Config.")

    project_root = config.project_root.resolve()
    include_globs = config.include_globs
    exclude_globs = config.exclude_globs
    test_globs = config.test_globs
    targets = [p.resolve() for p in paths] if paths else []

    logger.debug(f"Starting file discovery from project root: {project_root}")
    logger.debug(f"Include globs: {include_globs}")
    logger.debug(f"Exclude globs: {exclude_globs}")
    logger.debug(f"Test globs: {test_globs}")

    start_time = time.time()
    candidates: Set[Path] = set()
    for pattern in include_globs:
        glob_method = project_root.rglob if "**" in pattern else project_root.glob
        try:
            for p in glob_method(pattern):
                if p.is_symlink() or not p.is_file() or p.suffix != ".py":
                    continue
                if any(part in _SKIPPED_DIRS for part in p.relative_to(project_root).parts):
                    continue
                candidates.add(p.resolve())
        except PermissionError as e:
            logger.warning(
                f"Permission denied accessing path during glob for pattern '{pattern}': {e}. Skipping."
            )

    discovered = DiscoveredFiles()
    for file_path in sorted(candidates, key=str):
        rel_path = _relative(file_path, project_root)
        if rel_path is None:
            continue
        if matches_any(rel_path, exclude_globs):
            logger.debug(f"Excluding '{rel_path}'")
            continue

        if matches_any(rel_path, test_globs):
            discovered.tests.append(file_path)
            continue

        if targets and not _within_targets(file_path, targets):
            continue
        discovered.sources.append(file_path)

    logger.debug(
        f"Discovery finished in {time.time() - start_time:.4f} seconds: "
        f"{len(discovered.sources)} source modules, {len(discovered.tests)} test modules"
    )
    if not discovered.sources and not candidates:
        logger.warning("No files found matching include_globs patterns.")
    return discovered
