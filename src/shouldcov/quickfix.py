"""
Quick fix that writes a missing test method into its backing test class.

The fix is built during analysis but does nothing until ``apply`` is called.
It re-reads the test module at that point, so a test class that moved or
vanished in the meantime is reported as a conflict instead of corrupting the
file.

shouldcov/src/shouldcov/quickfix.py
"""

import ast
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import EditConflictError
from .model import TestMethod
from .source_index import scope_blocks

__all__ = ["FixContext", "FixResult", "CreateTestMethodFix"]

logger = logging.getLogger(__name__)

_DEFAULT_INDENT = "    "
_LINE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+\Z")


@dataclass(frozen=True)
class FixContext:
    """How a fix should be applied."""

    dry_run: bool = False
    encoding: str = "utf-8"


@dataclass
class FixResult:
    """Outcome of applying a fix. ``new_source`` is set whenever rendering succeeded."""

    applied: bool
    file_path: Optional[Path] = None
    new_source: Optional[str] = None
    error: Optional[str] = None


def _find_class_node(body: List[ast.stmt], name: str) -> Optional[ast.ClassDef]:
    for node in body:
        if isinstance(node, ast.ClassDef):
            if node.name == name:
                return node
            nested = _find_class_node(node.body, name)
            if nested is not None:
                return nested
        else:
            for block in scope_blocks(node):
                found = _find_class_node(block, name)
                if found is not None:
                    return found
    return None


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def _has_plain_import(tree: ast.Module, module: str) -> bool:
    return any(
        isinstance(node, ast.Import)
        and any(alias.name == module and alias.asname is None for alias in node.names)
        for node in tree.body
    )


def _header_end(lines: List[str], limit: int) -> int:
    """Number of leading comment or blank lines, at most ``limit``."""
    index = 0
    while index < min(limit, len(lines)):
        stripped = lines[index].strip()
        if stripped and not stripped.startswith("#"):
            break
        index += 1
    return index


def _import_insertion_index(tree: ast.Module, lines: List[str]) -> int:
    """0-based line index where a new top-level import line should go.

    Never above a shebang, encoding cookie or license header.
    """
    body = tree.body
    first_statement = body[0].lineno - 1 if body else len(lines)
    preamble_end = _header_end(lines, first_statement)
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        preamble_end = body[0].end_lineno
        body = body[1:]

    after_future = None
    for node in body:
        if isinstance(node, ast.ImportFrom) and node.module == "__future__":
            after_future = node.end_lineno
            continue
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            return node.lineno - 1
        break
    if after_future is not None:
        return after_future
    return preamble_end


class CreateTestMethodFix:
    """Creates the test method expected for one group of ``@should`` tags."""

    family_name = "Create test method"

    def __init__(self, test_method: TestMethod):
        self.test_method = test_method
        backing = test_method.test_class.backing
        self.file_path: Optional[Path] = backing.file_path if backing else None
        self.class_name = test_method.test_class.identity.class_name

    @property
    def text(self) -> str:
        return f"Create test method '{self.test_method.name}' for '{self.test_method.source_method.name}'"

    def __repr__(self) -> str:
        return f"CreateTestMethodFix({self.class_name}.{self.test_method.name})"

    def render(self, source: str) -> str:
        """Return ``source`` with the stub appended to the end of the test class.

        Raises:
            EditConflictError: The source no longer parses, no longer
                declares the test class, or declares it on a single line.
        """
        try:
            tree = ast.parse(source)
        except SyntaxError as e:
            raise EditConflictError(f"Test module no longer parses: {e}") from e

        node = _find_class_node(tree.body, self.class_name)
        if node is None:
            raise EditConflictError(f"Test class {self.class_name} not found")

        newline = "\r\n" if "\r\n" in source else "\n"
        lines = _LINE.findall(source)

        class_indent = _leading_whitespace(lines[node.lineno - 1])
        first = node.body[0]
        if first.lineno == node.lineno:
            raise EditConflictError(f"Test class {self.class_name} is declared on a single line")
        indent = _leading_whitespace(lines[first.lineno - 1]) or class_indent + _DEFAULT_INDENT
        body_indent = indent[len(class_indent) :] or _DEFAULT_INDENT

        stub = self.test_method.strategy.stub_method_lines(self.test_method.name, indent, body_indent)
        insertions: List[Tuple[int, str]] = [
            (node.end_lineno, newline + "".join(line + newline for line in stub))
        ]

        required = self.test_method.strategy.required_import
        if required and not _has_plain_import(tree, required):
            insertions.append(
                (_import_insertion_index(tree, lines), f"import {required}{newline}")
            )

        last = node.end_lineno - 1
        if not lines[last].endswith(("\n", "\r")):
            lines[last] += newline

        for index, text in sorted(insertions, key=lambda item: item[0], reverse=True):
            lines.insert(index, text)
        return "".join(lines)

    def apply(self, context: Optional[FixContext] = None) -> FixResult:
        """Write the stub into the test module as one file replacement.

        Failures are logged and reported in the result, never raised.
        """
        context = context or FixContext()
        if self.file_path is None:
            logger.warning(f"{self!r}: backing test class has no file to edit")
            return FixResult(applied=False, error="Test class has no source file")

        try:
            with open(self.file_path, encoding=context.encoding, newline="") as f:
                source = f.read()
            new_source = self.render(source)
            if not context.dry_run:
                self._replace_file(new_source, context.encoding)
        except EditConflictError as e:
            logger.warning(f"{self!r} not applied to {self.file_path}: {e}")
            return FixResult(applied=False, file_path=self.file_path, error=str(e))
        except OSError as e:
            logger.error(f"{self!r} could not edit {self.file_path}: {e}")
            return FixResult(applied=False, file_path=self.file_path, error=str(e))

        if not context.dry_run:
            logger.info(f"Added {self.class_name}.{self.test_method.name} to {self.file_path}")
        return FixResult(
            applied=not context.dry_run, file_path=self.file_path, new_source=new_source
        )

    def _replace_file(self, content: str, encoding: str) -> None:
        directory = self.file_path.parent
        fd, temp_name = tempfile.mkstemp(dir=directory, prefix=".shouldcov-", suffix=".py")
        try:
            with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
                f.write(content)
            shutil.copymode(self.file_path, temp_name)
            os.replace(temp_name, self.file_path)
        except OSError:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
