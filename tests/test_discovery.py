"""Tests for file discovery."""

from pathlib import Path

import pytest

from shouldcov.config import Config
from shouldcov.discovery import discover_files, matches_any


def _touch(root: Path, relative: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


@pytest.fixture
def project_tree(temp_dir: Path) -> Path:
    for relative in [
        "src/app/__init__.py",
        "src/app/calculator.py",
        "src/app/parser.py",
        "tests/test_calculator.py",
        "tests/helpers.py",
        "app_test.py",
        "build/lib/app/calculator.py",
        ".venv/lib/site.py",
        "README.md",
    ]:
        _touch(temp_dir, relative)
    return temp_dir


@pytest.mark.parametrize(
    "path, patterns, expected",
    [
        ("test_foo.py", ["**/test_*.py"], True),
        ("pkg/test_foo.py", ["**/test_*.py"], True),
        ("tests/helpers.py", ["tests/**/*.py"], True),
        ("tests/unit/helpers.py", ["tests/**/*.py"], True),
        ("src/app/foo.py", ["tests/**/*.py", "**/test_*.py"], False),
        ("build/lib/foo.py", ["build/**"], True),
    ],
)
def test_matches_any(path, patterns, expected):
    assert matches_any(path, patterns) is expected


def test_discover_splits_sources_and_tests(project_tree: Path):
    config = Config(project_tree, {"exclude_globs": ["build/**"]})

    discovered = discover_files(config)

    root = project_tree.resolve()
    assert discovered.sources == [
        root / "src/app/__init__.py",
        root / "src/app/calculator.py",
        root / "src/app/parser.py",
    ]
    assert discovered.tests == [
        root / "app_test.py",
        root / "tests/helpers.py",
        root / "tests/test_calculator.py",
    ]


def test_discover_limits_sources_to_targets(project_tree: Path):
    config = Config(project_tree, {"exclude_globs": ["build/**"]})

    discovered = discover_files(config, [project_tree / "src" / "app" / "parser.py"])

    assert discovered.sources == [project_tree.resolve() / "src/app/parser.py"]
    assert len(discovered.tests) == 3


def test_discover_with_directory_target(project_tree: Path):
    config = Config(project_tree, {"exclude_globs": ["build/**"]})

    discovered = discover_files(config, [project_tree / "src"])

    assert len(discovered.sources) == 3


def test_discover_skips_virtualenvs(project_tree: Path):
    discovered = discover_files(Config(project_tree, {}))

    all_files = [str(path) for path in discovered.sources + discovered.tests]
    assert not any(".venv" in path for path in all_files)
    assert any("build" in path for path in all_files)


def test_discover_requires_project_root():
    with pytest.raises(ValueError):
        discover_files(Config(None, {}))
