"""
Validator and formatter base types.

A validator turns one source file into Findings. A Finding may carry a bound
fix; nothing is edited until the caller applies it.

shouldcov/src/shouldcov/plugin_system.py
"""

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

__all__ = [
    "Severity",
    "Span",
    "Finding",
    "BaseValidator",
    "BaseFormatter",
]

# 1-based (line, column, end_line, end_column); zeros mean file level.
Span = Tuple[int, int, int, int]

_NO_SPAN: Span = (0, 0, 0, 0)


class Severity(Enum):
    """Severity levels for findings, lowest first."""

    OFF = "OFF"
    INFO = "INFO"
    WARN = "WARN"
    BLOCK = "BLOCK"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)

    def __lt__(self, other: "Severity") -> bool:
        return self.rank < other.rank

    @classmethod
    def from_setting(cls, value: Union[str, bool]) -> Optional["Severity"]:
        """Parse a ``[tool.shouldcov.rules]`` value.

        ``false`` turns a rule off and ``true`` keeps its default, returned as
        None.

        Raises:
            ValueError: The string is not a severity name.
        """
        if isinstance(value, bool):
            return None if value else cls.OFF
        return cls(value.strip().upper())


@dataclass
class Finding:
    """One reported problem, located by a 1-based span in ``file_path``."""

    rule_id: str
    message: str
    file_path: Path
    line: int = 0
    column: int = 0
    severity: Severity = Severity.WARN
    context: str = ""
    suggestion: Optional[str] = None
    end_line: int = 0
    end_column: int = 0
    fix: Optional[Any] = None

    @property
    def span(self) -> Span:
        return (self.line, self.column, self.end_line, self.end_column)

    @property
    def location(self) -> str:
        if self.line <= 0:
            return str(self.file_path)
        return f"{self.file_path}:{self.line}:{self.column}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert finding to dictionary for JSON output."""
        return {
            "rule": self.rule_id,
            "level": self.severity.value,
            "path": str(self.file_path),
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
            "msg": self.message,
            "context": self.context,
            "suggestion": self.suggestion,
            "fix": self.fix.text if self.fix is not None else None,
        }


class BaseValidator:
    """Base class for validators.

    Subclasses set ``rule_id`` and implement ``validate``. Validators that set
    ``needs_coverage_engine`` are also handed the shared coverage engine and
    the project root when they are created.
    """

    rule_id: str = ""
    name: str = ""
    description: str = ""
    default_severity: Severity = Severity.WARN
    needs_coverage_engine: bool = False

    def __init__(self, severity: Optional[Severity] = None, config: Optional[Dict] = None) -> None:
        self.severity = severity or self.default_severity
        self.config = config or {}

    def validate(self, file_path: Path, content: str, config: Any = None) -> Iterator[Finding]:
        """Validate a file and yield findings."""
        raise NotImplementedError

    def create_finding(
        self,
        message: str,
        file_path: Path,
        span: Span = _NO_SPAN,
        context: str = "",
        suggestion: Optional[str] = None,
        fix: Optional[Any] = None,
    ) -> Finding:
        """Create a Finding with this validator's rule_id and severity."""
        line, column, end_line, end_column = span
        return Finding(
            rule_id=self.rule_id,
            message=message,
            file_path=file_path,
            line=line,
            column=column,
            end_line=end_line,
            end_column=end_column,
            severity=self.severity,
            context=context,
            suggestion=suggestion,
            fix=fix,
        )


class BaseFormatter(ABC):
    """Base class for formatters."""

    name: str = ""
    description: str = ""

    @abstractmethod
    def format_results(
        self, findings: List[Finding], summary: Dict[str, int], config: Optional[Any] = None
    ) -> str:
        """Format validation results for output."""

    @staticmethod
    def count_by_severity(findings: List[Finding]) -> Dict[Severity, int]:
        counts = Counter(finding.severity for finding in findings)
        return {severity: counts.get(severity, 0) for severity in Severity if severity != Severity.OFF}
