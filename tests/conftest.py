"""Pytest configuration and fixtures for shouldcov tests."""

import tempfile
from pathlib import Path
from typing import Iterator, Optional

import pytest

from shouldcov.config import Config
from shouldcov.frameworks import TestClassIdentity
from shouldcov.model import ClassDeclaration

CALCULATOR_SOURCE = '''"""Calculator module."""


class Calculator:
    """A simple calculator."""

    def add(self, a, b):
        """Add two numbers.

        @should return the sum of both arguments
        @should handle negative numbers
        """
        return a + b

    def reset(self):
        return None
'''

CALCULATOR_TESTS = '''"""Tests for the calculator."""

import pytest


class TestCalculator:
    def test_add_should_return_the_sum_of_both_arguments(self):
        assert True
'''


class FakeClassIndex:
    """In-memory ClassIndex keyed by declared module name and class name."""

    def __init__(self, *classes: ClassDeclaration):
        self._classes = {(c.module_name, c.name): c for c in classes}

    def find_class(self, identity: TestClassIdentity) -> Optional[ClassDeclaration]:
        return self._classes.get((identity.module_name, identity.class_name))


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config(temp_dir: Path) -> Config:
    """Create a sample Config object for testing."""
    return Config(
        project_root=temp_dir,
        config_dict={
            "test_framework": "pytest",
            "include_globs": ["**/*.py"],
            "exclude_globs": ["**/__pycache__/**"],
            "rules": {},
        },
    )


@pytest.fixture
def pyproject_toml(temp_dir: Path) -> Path:
    """Create a sample pyproject.toml file."""
    config_path = temp_dir / "pyproject.toml"
    config_path.write_text(
        """[tool.shouldcov]
test_framework = "pytest"
include_globs = ["**/*.py"]
exclude_globs = ["build/**"]

[tool.shouldcov.rules]
BDD-UNUSED-SHOULD = "WARN"
"""
    )
    return config_path


@pytest.fixture
def sample_project(temp_dir: Path, pyproject_toml: Path) -> Path:
    """A project with one source module and a partially covering test module."""
    package = temp_dir / "src" / "app"
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("")
    (package / "calculator.py").write_text(CALCULATOR_SOURCE)

    tests = temp_dir / "tests"
    tests.mkdir()
    (tests / "test_calculator.py").write_text(CALCULATOR_TESTS)
    return temp_dir


@pytest.fixture
def calculator_source() -> str:
    return CALCULATOR_SOURCE


@pytest.fixture
def calculator_tests() -> str:
    return CALCULATOR_TESTS


@pytest.fixture
def make_index():
    """Factory for in-memory class indexes."""
    return FakeClassIndex
