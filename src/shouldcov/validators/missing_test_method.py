"""
Unused should annotations validator.

Reports classes with no backing test class, and ``@should`` tags with no
backing test method. Findings for missing test methods carry a fix that
writes the stub into the test class.

shouldcov/src/shouldcov/validators/missing_test_method.py
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from ..config import DEFAULT_GENERATED_GLOBS
from ..discovery import matches_any
from ..engine import CoverageEngine, CoverageState, Diagnostic
from ..plugin_system import BaseValidator, Finding, Severity
from ..source_index import SourceText, module_name_for, parse_module

__all__ = ["MissingTestMethodValidator"]

logger = logging.getLogger(__name__)


class MissingTestMethodValidator(BaseValidator):
    """Validator for ``@should`` tags without backing tests."""

    rule_id = "BDD-UNUSED-SHOULD"
    name = "Unused Should Annotations"
    group = "BDD"
    description = "Checks that every @should tag has a matching test method"
    default_severity = Severity.WARN
    needs_coverage_engine = True

    def __init__(
        self,
        severity: Optional[Severity] = None,
        config=None,
        engine: Optional[CoverageEngine] = None,
        project_root: Optional[Path] = None,
    ) -> None:
        super().__init__(severity=severity, config=config)
        self.engine = engine
        self.project_root = project_root

    def validate(self, file_path: Path, content: str, config=None) -> Iterator[Finding]:
        if self.engine is None:
            logger.debug(f"{self.rule_id}: no coverage engine, skipping {file_path}")
            return

        try:
            classes = parse_module(
                content,
                module_name_for(file_path, self.project_root),
                file_path=file_path,
                synthetic=self._is_generated(file_path),
            )
        except SyntaxError:
            return

        source = SourceText(content)
        for class_under_test in classes:
            result = self.engine.inspect(class_under_test)
            if result.state is CoverageState.MISSING_TEST_CLASS:
                identity = result.test_class.identity
                suggestion = f"Create class {identity.class_name} in {identity.module_name}.py"
            else:
                suggestion = None
            for diagnostic in result.diagnostics:
                yield self._to_finding(diagnostic, file_path, source, suggestion)

    def _to_finding(
        self,
        diagnostic: Diagnostic,
        file_path: Path,
        source: SourceText,
        suggestion: Optional[str],
    ) -> Finding:
        fix = diagnostic.fix
        return self.create_finding(
            message=diagnostic.message,
            file_path=file_path,
            span=source.position(diagnostic.anchor.start) + source.position(diagnostic.anchor.end),
            context=source.text[diagnostic.anchor.start : diagnostic.anchor.end],
            suggestion=fix.text if fix is not None else suggestion,
            fix=fix,
        )

    def _is_generated(self, file_path: Path) -> bool:
        if self.project_root is None:
            return False
        patterns = self.config.get("generated_globs", DEFAULT_GENERATED_GLOBS)
        try:
            rel_path = file_path.resolve().relative_to(self.project_root.resolve())
        except ValueError:
            return False
        return matches_any(str(rel_path).replace("\\", "/"), patterns)
