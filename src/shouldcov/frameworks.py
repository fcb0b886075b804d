"""
Naming conventions for the supported test frameworks.

Each framework maps a class-under-test to the test class expected to back it,
and a ``@should`` description to the test method expected to back it. The set
of frameworks is closed: adding one means adding a ``SupportedFramework``
member and its entry in ``_STRATEGIES``.

shouldcov/src/shouldcov/frameworks.py
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import ConfigurationError

__all__ = [
    "SupportedFramework",
    "MethodNameStyle",
    "TestClassIdentity",
    "TestFrameworkStrategy",
    "DEFAULT_TEST_FRAMEWORK",
    "get_strategy_for_framework",
    "supported_framework_names",
    "description_words",
]

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^0-9a-zA-Z\s]|_")


class SupportedFramework(Enum):
    """Test frameworks shouldcov knows how to name tests for."""

    PYTEST = "pytest"
    UNITTEST = "unittest"
    TRIAL = "trial"


class MethodNameStyle(Enum):
    """How description words are joined into a test method name."""

    UNDERSCORE = "underscore"
    CAMEL = "camel"


DEFAULT_TEST_FRAMEWORK = SupportedFramework.PYTEST


@dataclass(frozen=True)
class TestClassIdentity:
    """Expected location of a backing test class: test module leaf name plus class name."""

    __test__ = False

    module_name: str
    class_name: str

    @property
    def qualified_name(self) -> str:
        return f"{self.module_name}.{self.class_name}"

    def __str__(self) -> str:
        return self.qualified_name


def description_words(description: str) -> List[str]:
    """Split a behavior description into lowercase identifier words.

    Every character that is not an ASCII letter, digit or whitespace counts as
    a separator, underscores included.
    """
    return _NON_WORD.sub(" ", description).lower().split()


@dataclass(frozen=True)
class TestFrameworkStrategy:
    """Naming policy for one test framework.

    Attributes:
        framework: The framework this policy belongs to.
        class_name_template: ``str.format`` template taking ``name``.
        method_style: Whether description words are joined snake or camel case.
        fail_statement: Body line of a generated stub, in the framework's idiom.
        required_import: Module the stub body needs imported, if any.
    """

    __test__ = False

    framework: SupportedFramework
    class_name_template: str
    method_style: MethodNameStyle
    fail_statement: str
    required_import: Optional[str] = None

    @property
    def name(self) -> str:
        return self.framework.value

    def class_test_name(self, class_under_test) -> TestClassIdentity:
        """Map a class-under-test (anything with ``name`` and ``module_name``) to its test class."""
        leaf_module = class_under_test.module_name.rsplit(".", 1)[-1]
        return TestClassIdentity(
            module_name=f"test_{leaf_module}",
            class_name=self.class_name_template.format(name=class_under_test.name),
        )

    def method_test_name(self, method_name: str, description: str, position: int = 1) -> str:
        """Map a source method and one of its ``@should`` descriptions to a test method name.

        An empty (or all-punctuation) description falls back to the tag's
        1-based position so a usable name is still produced.
        """
        method = method_name.strip("_") or method_name
        words = description_words(description)

        if self.method_style is MethodNameStyle.CAMEL:
            suffix = "".join(word.capitalize() for word in words) if words else str(position)
            return f"test_{method}Should{suffix}"

        suffix = "_".join(words) if words else str(position)
        return f"test_{method}_should_{suffix}"

    def stub_method_lines(self, test_method_name: str, indent: str, body_indent: str) -> List[str]:
        """Render a failing stub test method, one list entry per line."""
        return [
            f"{indent}def {test_method_name}(self):",
            f"{indent}{body_indent}{self.fail_statement}",
        ]


_STRATEGIES: Dict[SupportedFramework, TestFrameworkStrategy] = {
    SupportedFramework.PYTEST: TestFrameworkStrategy(
        framework=SupportedFramework.PYTEST,
        class_name_template="Test{name}",
        method_style=MethodNameStyle.UNDERSCORE,
        fail_statement='pytest.fail("Not yet implemented")',
        required_import="pytest",
    ),
    SupportedFramework.UNITTEST: TestFrameworkStrategy(
        framework=SupportedFramework.UNITTEST,
        class_name_template="{name}Test",
        method_style=MethodNameStyle.UNDERSCORE,
        fail_statement='self.fail("Not yet implemented")',
    ),
    SupportedFramework.TRIAL: TestFrameworkStrategy(
        framework=SupportedFramework.TRIAL,
        class_name_template="{name}Tests",
        method_style=MethodNameStyle.CAMEL,
        fail_statement='self.fail("Not yet implemented")',
    ),
}


def supported_framework_names() -> Tuple[str, ...]:
    """Names accepted by ``get_strategy_for_framework``."""
    return tuple(framework.value for framework in SupportedFramework)


def get_strategy_for_framework(framework: Optional[str]) -> TestFrameworkStrategy:
    """Resolve a framework name (case-insensitive) to its naming strategy.

    Raises:
        ConfigurationError: The name is empty or not a supported framework.
    """
    if not framework:
        raise ConfigurationError(framework, "No test framework configured")

    try:
        key = SupportedFramework(framework.strip().lower())
    except ValueError:
        raise ConfigurationError(
            framework,
            f"Unsupported test framework {framework!r}; "
            f"expected one of {', '.join(supported_framework_names())}",
        ) from None

    logger.debug(f"Using {key.value} naming strategy")
    return _STRATEGIES[key]
