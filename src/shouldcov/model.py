"""
Coverage model: classes-under-test paired with their backing test classes.

The structural types (ClassDeclaration, MethodDeclaration) are read-only
snapshots handed over by a ClassIndex. TestClass and TestMethod pair them with
whatever the active naming strategy says should back them.

shouldcov/src/shouldcov/model.py
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from .behavior_tags import (
    BehaviorSpecification,
    DocComment,
    TextRange,
    has_behavior_tags,
    parse_behavior_tags,
)
from .frameworks import TestClassIdentity, TestFrameworkStrategy

__all__ = [
    "MethodDeclaration",
    "ClassDeclaration",
    "ClassIndex",
    "TestClass",
    "TestMethod",
    "build_test_class",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodDeclaration:
    """A method as declared in a class body."""

    name: str
    name_range: TextRange
    doc_comment: Optional[DocComment] = None


@dataclass(frozen=True)
class ClassDeclaration:
    """A class as declared in a module.

    ``qualified_name`` is None for classes that have no importable path, such
    as classes defined inside a function body. ``is_synthetic`` marks classes
    from generated files.
    """

    name: str
    qualified_name: Optional[str]
    module_name: str
    name_range: TextRange
    methods: Tuple[MethodDeclaration, ...] = ()
    file_path: Optional[Path] = None
    is_synthetic: bool = False
    _methods_by_name: Dict[str, MethodDeclaration] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        for method in self.methods:
            # Later definitions shadow earlier ones, as at runtime.
            self._methods_by_name[method.name] = method

    def find_method(self, name: str) -> Optional[MethodDeclaration]:
        return self._methods_by_name.get(name)


class ClassIndex(Protocol):
    """Read-only lookup of test classes by expected identity."""

    def find_class(self, identity: TestClassIdentity) -> Optional[ClassDeclaration]:
        """Return the declaration matching ``identity``, or None if there is none."""
        ...


class TestMethod:
    """A test method expected for one or more ``@should`` tags of a source method.

    Several tags on the same source method that derive the same name share a
    single TestMethod; one backing method satisfies all of them.
    """

    __test__ = False

    def __init__(
        self,
        test_class: "TestClass",
        source_method: MethodDeclaration,
        name: str,
        specifications: Tuple[BehaviorSpecification, ...],
        backing: Optional[MethodDeclaration],
    ):
        self.test_class = test_class
        self.source_method = source_method
        self.name = name
        self.specifications = specifications
        self.backing = backing

    @property
    def doc_comment(self) -> Optional[DocComment]:
        """Docstring the tags came from, used to re-derive their ranges."""
        return self.source_method.doc_comment

    @property
    def strategy(self) -> TestFrameworkStrategy:
        return self.test_class.strategy

    def really_exists(self) -> bool:
        return self.backing is not None

    def __repr__(self) -> str:
        return f"TestMethod({self.test_class.identity}.{self.name}, exists={self.really_exists()})"


class TestClass:
    """A class-under-test paired with its (possibly absent) backing test class."""

    __test__ = False

    def __init__(
        self,
        class_under_test: ClassDeclaration,
        strategy: TestFrameworkStrategy,
        backing: Optional[ClassDeclaration],
    ):
        self.class_under_test = class_under_test
        self.strategy = strategy
        self.identity = strategy.class_test_name(class_under_test)
        self.backing = backing
        self._methods: Optional[List[TestMethod]] = None

    def really_exists(self) -> bool:
        return self.backing is not None

    @property
    def all_methods(self) -> List[TestMethod]:
        """One TestMethod per distinct derived name, in source order."""
        if self._methods is None:
            self._methods = self._collect_methods()
        return list(self._methods)

    def _collect_methods(self) -> List[TestMethod]:
        methods: List[TestMethod] = []
        for source_method in self.class_under_test.methods:
            if not has_behavior_tags(source_method.doc_comment):
                continue

            grouped: Dict[str, List[BehaviorSpecification]] = {}
            for spec in parse_behavior_tags(source_method.doc_comment):
                name = self.strategy.method_test_name(
                    source_method.name, spec.description, spec.position
                )
                grouped.setdefault(name, []).append(spec)

            for name, specs in grouped.items():
                if len(specs) > 1:
                    logger.debug(
                        f"{len(specs)} @should tags on {source_method.name} map to {name}"
                    )
                backing = self.backing.find_method(name) if self.backing else None
                methods.append(TestMethod(self, source_method, name, tuple(specs), backing))
        return methods

    def __repr__(self) -> str:
        return f"TestClass({self.identity}, exists={self.really_exists()})"


def build_test_class(
    class_under_test: ClassDeclaration, strategy: TestFrameworkStrategy, index: ClassIndex
) -> TestClass:
    """Resolve the backing test class of ``class_under_test`` under ``strategy``."""
    identity = strategy.class_test_name(class_under_test)
    backing = index.find_class(identity)
    logger.debug(
        f"{class_under_test.qualified_name}: test class {identity} "
        f"{'found' if backing else 'not found'}"
    )
    return TestClass(class_under_test, strategy, backing)
