"""Tests for validator and formatter base types."""

from pathlib import Path

import pytest

from shouldcov.plugin_system import BaseFormatter, BaseValidator, Finding, Severity


class SpanValidator(BaseValidator):
    rule_id = "SPAN"
    default_severity = Severity.INFO


@pytest.mark.parametrize(
    "setting, expected",
    [
        ("warn", Severity.WARN),
        (" BLOCK ", Severity.BLOCK),
        ("off", Severity.OFF),
        (False, Severity.OFF),
        (True, None),
    ],
)
def test_severity_from_setting(setting, expected):
    assert Severity.from_setting(setting) is expected


def test_severity_from_invalid_setting():
    with pytest.raises(ValueError):
        Severity.from_setting("loud")


def test_severity_ordering():
    assert sorted([Severity.BLOCK, Severity.OFF, Severity.WARN, Severity.INFO]) == [
        Severity.OFF,
        Severity.INFO,
        Severity.WARN,
        Severity.BLOCK,
    ]


def test_create_finding_uses_span_and_severity():
    validator = SpanValidator()

    finding = validator.create_finding("message", Path("a.py"), span=(3, 5, 3, 9), context="text")

    assert finding.rule_id == "SPAN"
    assert finding.severity is Severity.INFO
    assert finding.span == (3, 5, 3, 9)
    assert finding.location == "a.py:3:5"


def test_file_level_finding_location():
    finding = SpanValidator().create_finding("message", Path("a.py"))

    assert finding.span == (0, 0, 0, 0)
    assert finding.location == "a.py"


def test_finding_to_dict_includes_fix_text():
    class StubFix:
        text = "Create test method 'test_x' for 'x'"

    finding = Finding("SPAN", "message", Path("a.py"), fix=StubFix())

    assert finding.to_dict()["fix"] == "Create test method 'test_x' for 'x'"


def test_count_by_severity():
    findings = [
        Finding("A", "m", Path("a.py"), severity=Severity.WARN),
        Finding("A", "m", Path("a.py"), severity=Severity.WARN),
        Finding("A", "m", Path("a.py"), severity=Severity.BLOCK),
    ]

    assert BaseFormatter.count_by_severity(findings) == {
        Severity.INFO: 0,
        Severity.WARN: 2,
        Severity.BLOCK: 1,
    }


def test_validate_must_be_implemented():
    with pytest.raises(NotImplementedError):
        SpanValidator().validate(Path("a.py"), "")
