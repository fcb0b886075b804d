"""
Exception types for shouldcov.

Absence of a test class or test method is never an exception; it is data that
drives diagnostics. These types cover the remaining failure modes.

shouldcov/src/shouldcov/errors.py
"""

__all__ = ["ShouldcovError", "ConfigurationError", "EditConflictError", "AnalysisCancelled"]


class ShouldcovError(Exception):
    """Base class for shouldcov errors."""


class ConfigurationError(ShouldcovError):
    """The configured test framework is unknown or unset."""

    def __init__(self, framework: str | None, message: str | None = None):
        self.framework = framework
        super().__init__(message or f"Unsupported test framework: {framework!r}")


class EditConflictError(ShouldcovError):
    """A fix target changed between analysis and fix invocation."""


class AnalysisCancelled(ShouldcovError):
    """Raised when the host cancels a coverage pass between methods."""
