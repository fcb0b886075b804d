"""
Output formatters for shouldcov findings.

shouldcov/src/shouldcov/reporting.py
"""

import json
from itertools import groupby
from typing import Any, Dict, List, Optional

from . import __version__
from .plugin_system import BaseFormatter, Finding, Severity

__all__ = [
    "NaturalLanguageFormatter",
    "JsonFormatter",
    "SarifFormatter",
    "LLMFormatter",
    "BUILTIN_FORMATTERS",
    "FORMAT_CHOICES",
    "DEFAULT_FORMAT",
]

DEFAULT_MAX_DISPLAYED = 50

_SARIF_SCHEMA = (
    "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"
)
_SARIF_LEVELS = {
    Severity.BLOCK: "error",
    Severity.WARN: "warning",
    Severity.INFO: "note",
    Severity.OFF: "none",
}


def _by_location(findings: List[Finding]) -> List[Finding]:
    return sorted(findings, key=lambda f: (str(f.file_path), f.line, f.column))


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class NaturalLanguageFormatter(BaseFormatter):
    """Findings grouped by file, one line each, followed by a severity tally."""

    name = "natural"
    description = "Readable report grouped by file"

    def format_results(
        self, findings: List[Finding], summary: Dict[str, int], config: Optional[Any] = None
    ) -> str:
        if not findings:
            return "All @should tags have backing tests!"

        limit = DEFAULT_MAX_DISPLAYED
        if config is not None:
            limit = config.get("max_displayed_issues", DEFAULT_MAX_DISPLAYED)

        ordered = _by_location(findings)
        shown = ordered[:limit] if limit > 0 else ordered

        lines: List[str] = []
        for file_path, group in groupby(shown, key=lambda f: f.file_path):
            if lines:
                lines.append("")
            lines.append(str(file_path))
            for finding in group:
                position = f"{finding.line}:{finding.column}" if finding.line > 0 else "-"
                context = f" '{finding.context}'" if finding.context else ""
                lines.append(
                    f"  {position}  {finding.severity.value}  {finding.rule_id}  "
                    f"{finding.message}{context}"
                )
                if finding.suggestion:
                    lines.append(f"      → {finding.suggestion}")

        hidden = len(ordered) - len(shown)
        if hidden:
            lines.append("")
            lines.append(
                f"... {hidden} more not shown. "
                "Set max_displayed_issues = 0 in [tool.shouldcov] to show all."
            )

        counts = self.count_by_severity(findings)
        lines.append("")
        lines.append(
            f"{_plural(len(findings), 'finding')}: {counts[Severity.BLOCK]} blocking, "
            f"{counts[Severity.WARN]} warning, {counts[Severity.INFO]} info"
        )
        return "\n".join(lines)


class JsonFormatter(BaseFormatter):
    """JSON output formatter for machine processing."""

    name = "json"
    description = "JSON output for CI and editor integration"

    def format_results(
        self, findings: List[Finding], summary: Dict[str, int], config: Optional[Any] = None
    ) -> str:
        result = {
            "version": __version__,
            "summary": summary,
            "findings": [finding.to_dict() for finding in _by_location(findings)],
        }
        return json.dumps(result, indent=2, default=str)


class SarifFormatter(BaseFormatter):
    """SARIF 2.1.0 output for code scanning."""

    name = "sarif"
    description = "SARIF format for GitHub code scanning"

    def format_results(
        self, findings: List[Finding], summary: Dict[str, int], config: Optional[Any] = None
    ) -> str:
        rules: Dict[str, Dict[str, Any]] = {}
        for finding in findings:
            rules.setdefault(
                finding.rule_id,
                {
                    "id": finding.rule_id,
                    "name": finding.rule_id,
                    "shortDescription": {"text": finding.message},
                    "defaultConfiguration": {"level": _SARIF_LEVELS[finding.severity]},
                },
            )

        sarif_output = {
            "$schema": _SARIF_SCHEMA,
            "version": "2.1.0",
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": "shouldcov",
                            "version": __version__,
                            "rules": list(rules.values()),
                        }
                    },
                    "results": [self._result(finding) for finding in findings],
                }
            ],
        }
        return json.dumps(sarif_output, separators=(",", ":"))

    @staticmethod
    def _result(finding: Finding) -> Dict[str, Any]:
        region = {"startLine": max(1, finding.line), "startColumn": max(1, finding.column)}
        if finding.end_line > 0:
            region["endLine"] = finding.end_line
            region["endColumn"] = max(1, finding.end_column)

        result: Dict[str, Any] = {
            "ruleId": finding.rule_id,
            "level": _SARIF_LEVELS[finding.severity],
            "message": {"text": finding.message},
            "locations": [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": str(finding.file_path)},
                        "region": region,
                    }
                }
            ],
        }
        if finding.suggestion:
            result["fixes"] = [{"description": {"text": finding.suggestion}}]
        return result


class LLMFormatter(BaseFormatter):
    """One self-contained line per finding, for pasting into an assistant prompt."""

    name = "llm"
    description = "Compact line-per-finding format for AI assistants"

    def format_results(
        self, findings: List[Finding], summary: Dict[str, int], config: Optional[Any] = None
    ) -> str:
        if not findings:
            return "No issues found."

        lines = []
        for finding in _by_location(findings):
            line = f"{finding.location} {finding.rule_id}: {finding.message}"
            if finding.context:
                line += f" '{finding.context}'"
            lines.append(line)
        return "\n".join(lines)


BUILTIN_FORMATTERS = {
    "natural": NaturalLanguageFormatter,
    "human": NaturalLanguageFormatter,
    "json": JsonFormatter,
    "sarif": SarifFormatter,
    "llm": LLMFormatter,
}

# Format choices for CLI - single source of truth
FORMAT_CHOICES = list(BUILTIN_FORMATTERS.keys())
DEFAULT_FORMAT = "natural"
