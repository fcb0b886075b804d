"""Validators that turn source modules into findings.

Third-party validators subclass BaseValidator and register themselves under
the ``shouldcov.validators`` entry point group.

shouldcov/src/shouldcov/validators/__init__.py
"""

from ..plugin_system import BaseValidator, Finding, Severity
from .registry import get_all_validators, get_validator, register_validator, validator_registry

__all__ = [
    "Severity",
    "Finding",
    "BaseValidator",
    "validator_registry",
    "register_validator",
    "get_validator",
    "get_all_validators",
]
