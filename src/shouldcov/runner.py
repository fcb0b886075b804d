"""
Validation runner for shouldcov.

Discovers source and test modules, indexes the test classes, runs the
enabled validators over the source modules and formats or fixes the results.
"""

import difflib
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Config
from .discovery import discover_files
from .engine import CoverageEngine, ExecutionMode
from .errors import AnalysisCancelled, ConfigurationError, EditConflictError
from .frameworks import get_strategy_for_framework
from .plugin_system import Finding, Severity
from .quickfix import CreateTestMethodFix, FixContext, FixResult
from .reporting import BUILTIN_FORMATTERS, DEFAULT_FORMAT
from .rules import RuleEngine
from .source_index import ProjectClassIndex

__all__ = ["ValidationRunner"]

logger = logging.getLogger(__name__)


class ValidationRunner:
    """Runs the should-coverage validators over a project."""

    def __init__(
        self,
        config: Config,
        project_root: Path,
        framework: Optional[str] = None,
        mode: ExecutionMode = ExecutionMode.NORMAL,
        cancel_event: Optional[Any] = None,
    ):
        self.config = config
        self.project_root = project_root
        self.framework = framework or config.test_framework
        self.mode = mode
        self.cancel_event = cancel_event
        self.rule_engine = RuleEngine(dict(config.settings))
        self.findings: List[Finding] = []
        self.files_checked = 0

    def configuration_error(self) -> Optional[ConfigurationError]:
        """Why the check would be a no-op, or None if a framework is usable."""
        if self.mode is ExecutionMode.TEST:
            return None
        try:
            get_strategy_for_framework(self.framework)
        except ConfigurationError as e:
            return e
        return None

    def run_validation(self, targets: Optional[List[Path]] = None) -> List[Finding]:
        """Run validation on the source modules under ``targets`` (default: whole project)."""
        self.findings = []
        discovered = discover_files(self.config, targets)
        index = ProjectClassIndex.from_files(discovered.tests)
        engine = CoverageEngine(index, self.framework, self.mode, self.cancel_event)
        validators = self.rule_engine.get_enabled_validators(
            engine=engine, project_root=self.project_root
        )

        self.files_checked = 0
        for file_path in discovered.sources:
            try:
                content = file_path.read_text(encoding="utf-8")
            except (UnicodeDecodeError, OSError) as e:
                logger.debug(f"Skipping unreadable file {file_path}: {e}")
                continue

            self.files_checked += 1
            for validator in validators:
                try:
                    for finding in validator.validate(file_path, content, self.config):
                        finding.file_path = self._display_path(file_path)
                        self.findings.append(finding)
                except AnalysisCancelled:
                    raise
                except Exception as e:
                    logger.error(
                        f"Validator {validator.rule_id} failed on {file_path}: {e}", exc_info=True
                    )

        return self.findings

    def _display_path(self, file_path: Path) -> Path:
        try:
            return file_path.relative_to(self.project_root.resolve())
        except ValueError:
            return file_path

    def fixes(self) -> List[CreateTestMethodFix]:
        """Distinct fixes bound to the current findings, in finding order."""
        seen = set()
        unique = []
        for finding in self.findings:
            if finding.fix is not None and id(finding.fix) not in seen:
                seen.add(id(finding.fix))
                unique.append(finding.fix)
        return unique

    def apply_fixes(self) -> List[FixResult]:
        """Apply every fix. Each one re-reads its test module, so fixes to one file stack."""
        return [fix.apply(FixContext()) for fix in self.fixes()]

    def preview_fixes(self) -> Dict[Path, str]:
        """Unified diffs of what ``apply_fixes`` would write, keyed by test module."""
        by_file: Dict[Path, List[CreateTestMethodFix]] = defaultdict(list)
        for fix in self.fixes():
            if fix.file_path is not None:
                by_file[fix.file_path].append(fix)

        diffs = {}
        for file_path, file_fixes in by_file.items():
            try:
                with open(file_path, encoding="utf-8", newline="") as f:
                    original = f.read()
            except OSError as e:
                logger.error(f"Could not read {file_path}: {e}")
                continue

            updated = original
            for fix in file_fixes:
                try:
                    updated = fix.render(updated)
                except EditConflictError as e:
                    logger.warning(f"{fix!r} skipped: {e}")

            label = str(self._display_path(file_path))
            diffs[file_path] = "".join(
                difflib.unified_diff(
                    original.splitlines(keepends=True),
                    updated.splitlines(keepends=True),
                    fromfile=f"a/{label}",
                    tofile=f"b/{label}",
                )
            )
        return diffs

    def get_summary(self) -> Dict[str, int]:
        """Get summary counts by severity level."""
        summary: Dict[str, int] = defaultdict(int)
        for finding in self.findings:
            summary[finding.severity.value] += 1
        return dict(summary)

    def format_output(self, output_format: str = DEFAULT_FORMAT) -> str:
        formatter_class = BUILTIN_FORMATTERS.get(output_format, BUILTIN_FORMATTERS[DEFAULT_FORMAT])
        return formatter_class().format_results(self.findings, self.get_summary(), self.config)

    def has_blocking_issues(self) -> bool:
        return any(finding.severity == Severity.BLOCK for finding in self.findings)

    def get_exit_code(self) -> int:
        return 1 if self.has_blocking_issues() else 0
