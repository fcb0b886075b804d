"""shouldcov: behavior-tag test coverage checker.

Finds ``@should`` tags in method docstrings that have no backing test method
and offers fixes that write the missing test stubs.
"""

__version__ = "0.1.0"

from shouldcov.behavior_tags import BehaviorSpecification, DocComment, TextRange, parse_behavior_tags
from shouldcov.config import Config, load_config
from shouldcov.engine import CoverageEngine, CoverageState, Diagnostic, ExecutionMode
from shouldcov.errors import AnalysisCancelled, ConfigurationError, EditConflictError
from shouldcov.frameworks import SupportedFramework, get_strategy_for_framework
from shouldcov.quickfix import CreateTestMethodFix, FixContext, FixResult

__all__ = [
    # Configuration
    "Config",
    "load_config",
    # Behavior tags
    "BehaviorSpecification",
    "DocComment",
    "TextRange",
    "parse_behavior_tags",
    # Naming strategies
    "SupportedFramework",
    "get_strategy_for_framework",
    # Engine and fixes
    "CoverageEngine",
    "CoverageState",
    "Diagnostic",
    "ExecutionMode",
    "CreateTestMethodFix",
    "FixContext",
    "FixResult",
    # Errors
    "AnalysisCancelled",
    "ConfigurationError",
    "EditConflictError",
]
