"""Tests for the validator registry and the unused-should validator."""

from pathlib import Path

import pytest

from shouldcov.engine import MISSING_TEST_CLASS_MESSAGE, MISSING_TEST_METHOD_MESSAGE, CoverageEngine
from shouldcov.quickfix import CreateTestMethodFix
from shouldcov.source_index import parse_module
from shouldcov.validators import BaseValidator, Severity, get_validator
from shouldcov.validators.missing_test_method import MissingTestMethodValidator
from shouldcov.validators.registry import ValidatorRegistry


class TestValidatorRegistry:
    def test_builtin_validator_is_registered(self):
        assert get_validator("BDD-UNUSED-SHOULD") is MissingTestMethodValidator

    def test_register_validator(self):
        class CustomValidator(BaseValidator):
            rule_id = "CUSTOM"

        registry = ValidatorRegistry()
        registry.register_validator(CustomValidator)

        assert registry.get_validator("CUSTOM") is CustomValidator
        assert "BDD-UNUSED-SHOULD" in registry.list_rule_ids()

    def test_register_rejects_non_validators(self):
        with pytest.raises(ValueError):
            ValidatorRegistry().register_validator(object)


class TestMissingTestMethodValidator:
    def _validator(self, index, severity=None, project_root=None):
        return MissingTestMethodValidator(
            severity=severity,
            engine=CoverageEngine(index, "pytest"),
            project_root=project_root,
        )

    def test_missing_test_method_finding(self, calculator_source, calculator_tests, make_index):
        index = make_index(*parse_module(calculator_tests, "test_calculator"))
        validator = self._validator(index)

        findings = list(validator.validate(Path("app/calculator.py"), calculator_source))

        assert len(findings) == 1
        finding = findings[0]
        assert finding.rule_id == "BDD-UNUSED-SHOULD"
        assert finding.message == MISSING_TEST_METHOD_MESSAGE
        assert finding.severity == Severity.WARN
        assert (finding.line, finding.column) == (11, 17)
        assert (finding.end_line, finding.end_column) == (11, 40)
        assert finding.context == "handle negative numbers"
        assert isinstance(finding.fix, CreateTestMethodFix)
        assert finding.suggestion == finding.fix.text

    def test_missing_test_class_finding(self, calculator_source, make_index):
        validator = self._validator(make_index())

        findings = list(validator.validate(Path("app/calculator.py"), calculator_source))

        assert len(findings) == 1
        finding = findings[0]
        assert finding.message == MISSING_TEST_CLASS_MESSAGE
        assert (finding.line, finding.column) == (4, 7)
        assert finding.context == "Calculator"
        assert finding.fix is None
        assert finding.suggestion == "Create class TestCalculator in test_calculator.py"

    def test_configured_severity_is_used(self, calculator_source, make_index):
        validator = self._validator(make_index(), severity=Severity.BLOCK)

        findings = list(validator.validate(Path("app/calculator.py"), calculator_source))

        assert findings[0].severity == Severity.BLOCK

    def test_generated_files_are_skipped(self, temp_dir: Path, calculator_source, make_index):
        validator = self._validator(make_index(), project_root=temp_dir)

        findings = list(validator.validate(temp_dir / "gen" / "calculator_pb2.py", calculator_source))

        assert findings == []

    def test_unparsable_source_yields_nothing(self, make_index):
        findings = list(self._validator(make_index()).validate(Path("broken.py"), "class (:\n"))

        assert findings == []

    def test_without_engine_yields_nothing(self, calculator_source):
        validator = MissingTestMethodValidator()

        assert list(validator.validate(Path("app/calculator.py"), calculator_source)) == []
