"""
Structural model of Python source files built with ``ast``.

Turns module source into ClassDeclaration snapshots with absolute character
ranges for class names, method names and docstring bodies, and indexes test
modules so backing test classes can be looked up by identity.

shouldcov/src/shouldcov/source_index.py
"""

import ast
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .behavior_tags import DocComment, TextRange
from .frameworks import TestClassIdentity
from .model import ClassDeclaration, MethodDeclaration

__all__ = [
    "SourceText",
    "parse_module",
    "module_name_for",
    "scope_blocks",
    "ProjectClassIndex",
]

logger = logging.getLogger(__name__)

_NEWLINE = re.compile(r"\r\n|\r|\n")
_STRING_PREFIX = re.compile(r"[rRuUbBfF]*")
_COMPOUND_STATEMENTS = (
    ast.If,
    ast.Try,
    ast.With,
    ast.AsyncWith,
    ast.For,
    ast.AsyncFor,
    ast.While,
)


class SourceText:
    """Maps between ``ast`` positions, absolute offsets and display positions."""

    def __init__(self, text: str):
        self.text = text
        self._line_starts = [0] + [match.end() for match in _NEWLINE.finditer(text)]

    def offset(self, lineno: int, col_offset: int) -> int:
        """Absolute character offset of an ``ast`` (1-based line, UTF-8 byte column) position."""
        line_start = self._line_starts[lineno - 1]
        line_end = (
            self._line_starts[lineno] if lineno < len(self._line_starts) else len(self.text)
        )
        line_bytes = self.text[line_start:line_end].encode("utf-8")
        return line_start + len(line_bytes[:col_offset].decode("utf-8", errors="ignore"))

    def position(self, offset: int) -> Tuple[int, int]:
        """1-based (line, column) of an absolute character offset."""
        low, high = 0, len(self._line_starts) - 1
        while low < high:
            mid = (low + high + 1) // 2
            if self._line_starts[mid] <= offset:
                low = mid
            else:
                high = mid - 1
        return low + 1, offset - self._line_starts[low] + 1


def scope_blocks(node: ast.stmt) -> List[List[ast.stmt]]:
    """Statement blocks of a compound statement that run in the enclosing scope.

    Covers every branch, including ``except`` handlers. Returns an empty list
    for anything else.
    """
    if not isinstance(node, _COMPOUND_STATEMENTS):
        return []
    blocks = [getattr(node, name, []) for name in ("body", "orelse", "finalbody")]
    blocks.extend(handler.body for handler in getattr(node, "handlers", []))
    return blocks


def module_name_for(file_path: Path, project_root: Optional[Path] = None) -> str:
    """Dotted module name of ``file_path`` relative to the project root.

    A leading ``src`` directory is dropped and ``__init__`` modules name
    their package.
    """
    path = file_path
    if project_root is not None:
        try:
            path = file_path.resolve().relative_to(project_root.resolve())
        except ValueError:
            path = Path(file_path.name)

    parts = list(path.with_suffix("").parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    if len(parts) > 1 and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts) or file_path.stem


def _docstring_of(node: ast.AST, source: SourceText) -> Optional[DocComment]:
    body = getattr(node, "body", None)
    if not body:
        return None
    first = body[0]
    if not (
        isinstance(first, ast.Expr)
        and isinstance(first.value, ast.Constant)
        and isinstance(first.value.value, str)
    ):
        return None

    literal = first.value
    start = source.offset(literal.lineno, literal.col_offset)
    end = source.offset(literal.end_lineno, literal.end_col_offset)
    segment = source.text[start:end]

    prefix = _STRING_PREFIX.match(segment).end()
    quote = segment[prefix : prefix + 3]
    if quote not in ('"""', "'''"):
        quote = segment[prefix : prefix + 1]
    inner_start = start + prefix + len(quote)
    inner_end = max(inner_start, end - len(quote))
    return DocComment(text=source.text[inner_start:inner_end], offset=inner_start)


def _name_range(node: ast.AST, keyword: str, source: SourceText) -> TextRange:
    start = source.offset(node.lineno, node.col_offset)
    pattern = re.compile(rf"{keyword}\s+({re.escape(node.name)})\b")
    match = pattern.search(source.text, start)
    if match is None:
        # Fall back to the statement start rather than guessing.
        return TextRange(start, start + len(keyword))
    return TextRange(match.start(1), match.end(1))


def _methods_of(node: ast.ClassDef, source: SourceText) -> Tuple[MethodDeclaration, ...]:
    methods = []
    for child in node.body:
        if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
            methods.append(
                MethodDeclaration(
                    name=child.name,
                    name_range=_name_range(child, "def", source),
                    doc_comment=_docstring_of(child, source),
                )
            )
    return tuple(methods)


def parse_module(
    content: str,
    module_name: str,
    file_path: Optional[Path] = None,
    synthetic: bool = False,
) -> List[ClassDeclaration]:
    """Parse module source into class declarations, outer classes first.

    Raises:
        SyntaxError: The source does not parse.
    """
    tree = ast.parse(content)
    source = SourceText(content)
    classes: List[ClassDeclaration] = []

    def visit(body: Iterable[ast.stmt], prefix: Optional[str]) -> None:
        for node in body:
            if isinstance(node, ast.ClassDef):
                qualified = f"{prefix}.{node.name}" if prefix is not None else None
                classes.append(
                    ClassDeclaration(
                        name=node.name,
                        qualified_name=qualified,
                        module_name=module_name,
                        name_range=_name_range(node, "class", source),
                        methods=_methods_of(node, source),
                        file_path=file_path,
                        is_synthetic=synthetic,
                    )
                )
                visit(node.body, qualified)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                # Classes local to a function have no importable name.
                visit(node.body, None)
            else:
                for block in scope_blocks(node):
                    visit(block, prefix)

    visit(tree.body, module_name)
    return classes


class ProjectClassIndex:
    """Index of test classes keyed by test module leaf name and class name."""

    def __init__(self):
        self._classes: Dict[Tuple[str, str], ClassDeclaration] = {}

    def __len__(self) -> int:
        return len(self._classes)

    def add_source(self, content: str, file_path: Path) -> int:
        """Index the classes of one test module. Returns how many were added."""
        module_leaf = file_path.stem
        try:
            declarations = parse_module(content, module_leaf, file_path=file_path)
        except SyntaxError as e:
            logger.debug(f"Skipping unparsable test module {file_path}: {e}")
            return 0

        added = 0
        for declaration in declarations:
            if declaration.qualified_name is None:
                continue
            key = (module_leaf, declaration.name)
            if key in self._classes:
                logger.debug(
                    f"Duplicate test class {declaration.name} in {file_path}; "
                    f"keeping {self._classes[key].file_path}"
                )
                continue
            self._classes[key] = declaration
            added += 1
        return added

    def add_file(self, file_path: Path) -> int:
        try:
            content = file_path.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Could not read test module {file_path}: {e}")
            return 0
        return self.add_source(content, file_path)

    @classmethod
    def from_files(cls, file_paths: Iterable[Path]) -> "ProjectClassIndex":
        index = cls()
        for file_path in file_paths:
            index.add_file(file_path)
        logger.debug(f"Indexed {len(index)} test classes")
        return index

    def find_class(self, identity: TestClassIdentity) -> Optional[ClassDeclaration]:
        return self._classes.get((identity.module_name, identity.class_name))
