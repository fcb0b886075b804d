"""Tests for the coverage engine."""

import logging
import threading
from pathlib import Path

import pytest

from shouldcov.engine import (
    MISSING_TEST_CLASS_MESSAGE,
    MISSING_TEST_METHOD_MESSAGE,
    CoverageEngine,
    CoverageState,
    ExecutionMode,
)
from shouldcov.errors import AnalysisCancelled
from shouldcov.plugin_system import Severity
from shouldcov.source_index import ProjectClassIndex, parse_module

FOO = '''class Foo:
    def bar(self, value):
        """Check a value.

        @should return true when input is valid
        """
        return True

    def baz(self):
        """
        @should accept empty input
        @should reject None
        """
'''

FOO_TEST = '''import unittest


class FooTest(unittest.TestCase):
    def test_bar_should_return_true_when_input_is_valid(self):
        self.assertTrue(True)
'''

FOO_TEST_COMPLETE = FOO_TEST + '''
    def test_baz_should_accept_empty_input(self):
        pass

    def test_baz_should_reject_none(self):
        pass
'''


def _foo():
    return parse_module(FOO, "pkg.foo")[0]


def _text(anchor):
    return FOO[anchor.start : anchor.end]


class TestCoverageStates:
    def test_missing_test_class(self, make_index):
        engine = CoverageEngine(make_index(), "unittest")

        result = engine.inspect(_foo())

        assert result.state is CoverageState.MISSING_TEST_CLASS
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.message == MISSING_TEST_CLASS_MESSAGE
        assert _text(diagnostic.anchor) == "Foo"
        assert diagnostic.fix is None
        assert diagnostic.severity is Severity.WARN

    def test_missing_test_method(self, make_index):
        index = make_index(*parse_module(FOO_TEST, "test_foo"))
        engine = CoverageEngine(index, "unittest")

        result = engine.inspect(_foo())

        assert result.state is CoverageState.PARTIAL_COVERAGE
        assert [_text(d.anchor) for d in result.diagnostics] == ["accept empty input", "reject None"]
        assert all(d.message == MISSING_TEST_METHOD_MESSAGE for d in result.diagnostics)

    def test_existing_test_method_is_not_reported(self, make_index):
        index = make_index(*parse_module(FOO_TEST, "test_foo"))

        diagnostics = CoverageEngine(index, "unittest").analyze(_foo())

        assert "return true when input is valid" not in [_text(d.anchor) for d in diagnostics]

    def test_each_tag_gets_its_own_fix(self, make_index):
        index = make_index(*parse_module(FOO_TEST, "test_foo"))

        diagnostics = CoverageEngine(index, "unittest").analyze(_foo())

        assert diagnostics[0].fix is not diagnostics[1].fix
        assert diagnostics[0].fix.test_method.name == "test_baz_should_accept_empty_input"
        assert diagnostics[1].fix.test_method.name == "test_baz_should_reject_none"
        assert "baz" in diagnostics[0].fix.text

    def test_fully_covered(self, make_index):
        index = make_index(*parse_module(FOO_TEST_COMPLETE, "test_foo"))

        result = CoverageEngine(index, "unittest").inspect(_foo())

        assert result.state is CoverageState.COVERED
        assert result.diagnostics == []

    def test_class_without_tags_is_covered_once_test_class_exists(self, make_index):
        plain = parse_module("class Foo:\n    def bar(self):\n        pass\n", "pkg.foo")[0]
        index = make_index(*parse_module(FOO_TEST, "test_foo"))

        result = CoverageEngine(index, "unittest").inspect(plain)

        assert result.state is CoverageState.COVERED

    def test_function_local_class_is_excluded(self, make_index):
        source = "def factory():\n    class Foo:\n        '''@should x'''\n    return Foo\n"
        local = parse_module(source, "pkg.foo")[0]

        result = CoverageEngine(make_index(), "unittest").inspect(local)

        assert result.state is CoverageState.EXCLUDED
        assert result.diagnostics == []

    def test_generated_class_is_excluded(self, make_index):
        generated = parse_module(FOO, "pkg.foo_pb2", synthetic=True)[0]

        result = CoverageEngine(make_index(), "unittest").inspect(generated)

        assert result.state is CoverageState.EXCLUDED


class TestConfiguration:
    @pytest.mark.parametrize("framework", [None, ""])
    def test_unconfigured_framework_is_silent(self, make_index, framework):
        result = CoverageEngine(make_index(), framework).inspect(_foo())

        assert result.state is CoverageState.UNCONFIGURED
        assert result.diagnostics == []

    def test_unknown_framework_is_logged_and_silent(self, make_index, caplog):
        with caplog.at_level(logging.WARNING, logger="shouldcov.engine"):
            result = CoverageEngine(make_index(), "nose").inspect(_foo())

        assert result.state is CoverageState.UNCONFIGURED
        assert "nose" in caplog.text

    def test_test_mode_uses_default_framework(self, make_index):
        engine = CoverageEngine(make_index(), None, mode=ExecutionMode.TEST)

        result = engine.inspect(_foo())

        assert result.state is CoverageState.MISSING_TEST_CLASS
        assert result.test_class.identity.class_name == "TestFoo"

    def test_test_mode_ignores_configured_framework(self, make_index):
        engine = CoverageEngine(make_index(), "trial", mode=ExecutionMode.TEST)

        assert engine.resolve_strategy().name == "pytest"


class TestAnalysisBehavior:
    def test_analysis_is_repeatable(self, make_index):
        engine = CoverageEngine(make_index(*parse_module(FOO_TEST, "test_foo")), "unittest")

        assert engine.analyze(_foo()) == engine.analyze(_foo())

    def test_duplicate_descriptions_share_one_fix(self, make_index):
        source = "class Foo:\n    def bar(self):\n        '''\n        @should work\n        @should work\n        '''\n"
        foo = parse_module(source, "pkg.foo")[0]
        index = make_index(*parse_module(FOO_TEST, "test_foo"))

        diagnostics = CoverageEngine(index, "unittest").analyze(foo)

        assert len(diagnostics) == 2
        assert diagnostics[0].anchor != diagnostics[1].anchor
        assert diagnostics[0].fix is diagnostics[1].fix

    def test_empty_description_anchors_at_marker(self, make_index):
        source = "class Foo:\n    def bar(self):\n        '''\n        @should\n        '''\n"
        foo = parse_module(source, "pkg.foo")[0]
        index = make_index(*parse_module(FOO_TEST, "test_foo"))

        diagnostics = CoverageEngine(index, "unittest").analyze(foo)

        assert len(diagnostics) == 1
        assert source[diagnostics[0].anchor.start : diagnostics[0].anchor.end] == "@should"
        assert diagnostics[0].fix.test_method.name == "test_bar_should_1"

    def test_cancellation_between_methods(self, make_index):
        cancel = threading.Event()
        cancel.set()
        index = make_index(*parse_module(FOO_TEST, "test_foo"))

        with pytest.raises(AnalysisCancelled):
            CoverageEngine(index, "unittest", cancel_event=cancel).inspect(_foo())

    def test_unset_cancel_token_does_not_interrupt(self, make_index):
        index = make_index(*parse_module(FOO_TEST, "test_foo"))
        engine = CoverageEngine(index, "unittest", cancel_event=threading.Event())

        assert len(engine.analyze(_foo())) == 2


def test_applying_fix_resolves_the_diagnostic(temp_dir: Path):
    test_file = temp_dir / "test_foo.py"
    test_file.write_text(FOO_TEST)
    engine = CoverageEngine(ProjectClassIndex.from_files([test_file]), "unittest")

    diagnostics = engine.analyze(_foo())
    for fix in {id(d.fix): d.fix for d in diagnostics}.values():
        assert fix.apply().applied

    engine = CoverageEngine(ProjectClassIndex.from_files([test_file]), "unittest")
    assert engine.analyze(_foo()) == []
