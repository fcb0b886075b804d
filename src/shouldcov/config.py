"""Configuration loading for shouldcov.

Settings live in the ``[tool.shouldcov]`` table of the nearest pyproject.toml.
A missing file, table or key is never an error: the check simply has less to
go on, and an unset ``test_framework`` turns it into a no-op.

shouldcov/src/shouldcov/config.py
"""

import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional

from shouldcov.utils import walk_up_for_config

if sys.version_info >= (3, 11):

    import tomllib
else:

    try:

        import tomli as tomllib
    except ImportError as e:

        raise ImportError(
            "shouldcov needs the 'tomli' package to read pyproject.toml on Python < 3.11. "
            "Hint: pip install tomli"
        ) from e

__all__ = [
    "Config",
    "load_config",
    "DEFAULT_INCLUDE_GLOBS",
    "DEFAULT_TEST_GLOBS",
    "DEFAULT_GENERATED_GLOBS",
]

logger = logging.getLogger(__name__)

TOOL_SECTION = "shouldcov"

DEFAULT_INCLUDE_GLOBS = ["**/*.py"]
DEFAULT_TEST_GLOBS = ["tests/**/*.py", "**/test_*.py", "**/*_test.py"]
DEFAULT_GENERATED_GLOBS = ["**/*_pb2.py", "**/*_pb2_grpc.py"]


class Config:
    """Read-only view of ``[tool.shouldcov]``.

    Attributes:
        project_root: Directory holding the pyproject.toml, or None when none
            was found.
        settings: The raw table; empty when the file or table is missing.
    """

    def __init__(self, project_root: Optional[Path], config_dict: Optional[Dict[str, Any]] = None):
        self._project_root = project_root
        self._settings = dict(config_dict or {})

    @property
    def project_root(self) -> Optional[Path]:
        return self._project_root

    @property
    def settings(self) -> Mapping[str, Any]:
        return self._settings

    @property
    def test_framework(self) -> Optional[str]:
        """Configured framework name, or None when unset or blank."""
        value = self._settings.get("test_framework")
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning(f"[tool.{TOOL_SECTION}] test_framework must be a string, got {value!r}")
            return None
        return value.strip() or None

    @property
    def include_globs(self) -> List[str]:
        return self._globs("include_globs", DEFAULT_INCLUDE_GLOBS)

    @property
    def exclude_globs(self) -> List[str]:
        return self._globs("exclude_globs", [])

    @property
    def test_globs(self) -> List[str]:
        return self._globs("test_globs", DEFAULT_TEST_GLOBS)

    def _globs(self, key: str, default: List[str]) -> List[str]:
        value = self._settings.get(key)
        if value is None:
            return list(default)
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return list(value)
        logger.warning(
            f"[tool.{TOOL_SECTION}] {key} must be a list of strings; using {default}"
        )
        return list(default)

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    def __getitem__(self, key: str) -> Any:
        try:
            return self._settings[key]
        except KeyError:
            raise KeyError(f"'{key}' is not set in [tool.{TOOL_SECTION}]") from None

    def __contains__(self, key: str) -> bool:
        return key in self._settings


def _read_tool_section(pyproject_path: Path) -> Dict[str, Any]:
    try:
        with open(pyproject_path, "rb") as f:
            document = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.error(f"Error parsing {pyproject_path}: {e}. Using empty configuration.")
        return {}
    except OSError as e:
        logger.error(f"Error reading {pyproject_path}: {e}. Using empty configuration.")
        return {}

    tool = document.get("tool", {})
    section = tool.get(TOOL_SECTION, {}) if isinstance(tool, dict) else {}
    if not isinstance(section, dict):
        logger.warning(f"[tool.{TOOL_SECTION}] in {pyproject_path} is not a table; ignoring it.")
        return {}
    if not section:
        logger.info(f"{pyproject_path} has no [tool.{TOOL_SECTION}] settings")
    return section


def load_config(start_path: Path) -> Config:
    """Load settings from the nearest pyproject.toml at or above ``start_path``.

    Returns:
        A Config. Its project_root is None when no pyproject.toml was found,
        and its settings are empty when the file has no usable table.
    """
    project_root = walk_up_for_config(start_path)
    if project_root is None:
        logger.warning(f"No pyproject.toml found at or above '{start_path}'")
        return Config(project_root=None)

    pyproject_path = project_root / "pyproject.toml"
    logger.debug(f"Loading [tool.{TOOL_SECTION}] from {pyproject_path}")
    return Config(project_root=project_root, config_dict=_read_tool_section(pyproject_path))
