"""
Coverage engine: turns one class-under-test into diagnostics.

A coverage pass ends in exactly one of these states:

    EXCLUDED            the class has no importable name or is generated code
    UNCONFIGURED        no usable test framework is configured
    MISSING_TEST_CLASS  the backing test class does not exist
    PARTIAL_COVERAGE    some ``@should`` tags have no backing test method
    COVERED             every ``@should`` tag has a backing test method

Only MISSING_TEST_CLASS and PARTIAL_COVERAGE produce diagnostics.

shouldcov/src/shouldcov/engine.py
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol

from .behavior_tags import TextRange, parse_behavior_tags
from .errors import AnalysisCancelled, ConfigurationError
from .frameworks import DEFAULT_TEST_FRAMEWORK, TestFrameworkStrategy, get_strategy_for_framework
from .model import ClassDeclaration, ClassIndex, TestClass, TestMethod, build_test_class
from .plugin_system import Severity
from .quickfix import CreateTestMethodFix

__all__ = [
    "MISSING_TEST_CLASS_MESSAGE",
    "MISSING_TEST_METHOD_MESSAGE",
    "ExecutionMode",
    "CoverageState",
    "Diagnostic",
    "CoveragePass",
    "CoverageEngine",
]

logger = logging.getLogger(__name__)

MISSING_TEST_CLASS_MESSAGE = "Missing Test Class"
MISSING_TEST_METHOD_MESSAGE = "Missing test method for should annotation"


class ExecutionMode(Enum):
    """NORMAL reads the framework from configuration; TEST always uses the default one."""

    NORMAL = "normal"
    TEST = "test"


class CoverageState(Enum):
    EXCLUDED = "excluded"
    UNCONFIGURED = "unconfigured"
    MISSING_TEST_CLASS = "missing_test_class"
    PARTIAL_COVERAGE = "partial_coverage"
    COVERED = "covered"


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class Diagnostic:
    """One problem found in a class-under-test, with an optional bound fix."""

    file_path: Optional[Path]
    anchor: TextRange
    message: str
    severity: Severity = Severity.WARN
    fix: Optional[CreateTestMethodFix] = field(default=None, compare=False)


@dataclass
class CoveragePass:
    """Result of analyzing one class."""

    class_under_test: ClassDeclaration
    state: CoverageState
    diagnostics: List[Diagnostic] = field(default_factory=list)
    test_class: Optional[TestClass] = None


class CoverageEngine:
    """Checks classes-under-test against their backing test classes.

    Args:
        index: Lookup for backing test classes.
        framework: Configured framework name; empty or None means unconfigured.
        mode: ``ExecutionMode.TEST`` ignores ``framework`` and uses the default.
        cancel_event: Anything with ``is_set()``; checked between methods.
    """

    def __init__(
        self,
        index: ClassIndex,
        framework: Optional[str] = None,
        mode: ExecutionMode = ExecutionMode.NORMAL,
        cancel_event: Optional[CancelToken] = None,
    ):
        self.index = index
        self.framework = framework
        self.mode = mode
        self.cancel_event = cancel_event

    def resolve_strategy(self) -> Optional[TestFrameworkStrategy]:
        """Strategy for this pass, or None when the check should not run."""
        if self.mode is ExecutionMode.TEST:
            return get_strategy_for_framework(DEFAULT_TEST_FRAMEWORK.value)
        if not self.framework:
            return None
        try:
            return get_strategy_for_framework(self.framework)
        except ConfigurationError as e:
            logger.warning(f"Skipping should-coverage check: {e}")
            return None

    def analyze(self, class_under_test: ClassDeclaration) -> List[Diagnostic]:
        """Diagnostics for one class; empty when excluded, unconfigured or fully covered."""
        return self.inspect(class_under_test).diagnostics

    def inspect(self, class_under_test: ClassDeclaration) -> CoveragePass:
        if class_under_test.qualified_name is None or class_under_test.is_synthetic:
            logger.debug(f"Ignoring unsupported class {class_under_test.name}")
            return CoveragePass(class_under_test, CoverageState.EXCLUDED)

        strategy = self.resolve_strategy()
        if strategy is None:
            return CoveragePass(class_under_test, CoverageState.UNCONFIGURED)

        test_class = build_test_class(class_under_test, strategy, self.index)

        if not test_class.really_exists():
            diagnostic = Diagnostic(
                file_path=class_under_test.file_path,
                anchor=class_under_test.name_range,
                message=MISSING_TEST_CLASS_MESSAGE,
            )
            return CoveragePass(
                class_under_test, CoverageState.MISSING_TEST_CLASS, [diagnostic], test_class
            )

        diagnostics: List[Diagnostic] = []
        for method in test_class.all_methods:
            self._check_cancelled(class_under_test)
            if not method.really_exists():
                diagnostics.extend(self._highlight_should_tags(method))

        state = CoverageState.PARTIAL_COVERAGE if diagnostics else CoverageState.COVERED
        return CoveragePass(class_under_test, state, diagnostics, test_class)

    def _highlight_should_tags(self, method: TestMethod) -> List[Diagnostic]:
        fix = CreateTestMethodFix(method)
        strategy = method.strategy
        diagnostics = []
        for spec in parse_behavior_tags(method.doc_comment):
            name = strategy.method_test_name(
                method.source_method.name, spec.description, spec.position
            )
            if name != method.name:
                continue
            diagnostics.append(
                Diagnostic(
                    file_path=method.test_class.class_under_test.file_path,
                    anchor=spec.range,
                    message=MISSING_TEST_METHOD_MESSAGE,
                    fix=fix,
                )
            )
        return diagnostics

    def _check_cancelled(self, class_under_test: ClassDeclaration) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            logger.debug(f"Coverage pass for {class_under_test.qualified_name} cancelled")
            raise AnalysisCancelled(class_under_test.qualified_name)
