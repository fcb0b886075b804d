"""Validator registry.

Built-in validators come from the modules in ``_BUILTIN_MODULES``; third-party
ones are loaded from the ``shouldcov.validators`` entry point group the first
time the registry is queried.

shouldcov/src/shouldcov/validators/registry.py
"""

import importlib
import importlib.metadata
import inspect
import logging
from typing import Dict, List, Optional, Type

from ..plugin_system import BaseValidator

__all__ = [
    "ValidatorRegistry",
    "validator_registry",
    "register_validator",
    "get_validator",
    "get_all_validators",
]

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "shouldcov.validators"

_BUILTIN_MODULES = [
    "shouldcov.validators.missing_test_method",
]


class ValidatorRegistry:
    """Maps rule ids to validator classes."""

    def __init__(self):
        self._validators: Dict[str, Type[BaseValidator]] = {}
        self._loaded = False

    def register_validator(self, validator_class: Type[BaseValidator]) -> None:
        if not (inspect.isclass(validator_class) and issubclass(validator_class, BaseValidator)):
            raise ValueError(f"Validator {validator_class!r} must inherit from BaseValidator")
        if not validator_class.rule_id:
            raise ValueError(f"Validator {validator_class.__name__} has no rule_id")

        existing = self._validators.get(validator_class.rule_id)
        if existing is not None and existing is not validator_class:
            logger.warning(
                f"Rule {validator_class.rule_id}: {validator_class.__name__} replaces {existing.__name__}"
            )
        self._validators[validator_class.rule_id] = validator_class

    def get_validator(self, rule_id: str) -> Optional[Type[BaseValidator]]:
        self._ensure_loaded()
        return self._validators.get(rule_id)

    def get_all_validators(self) -> Dict[str, Type[BaseValidator]]:
        self._ensure_loaded()
        return dict(self._validators)

    def list_rule_ids(self) -> List[str]:
        self._ensure_loaded()
        return sorted(self._validators)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True

        for module_name in _BUILTIN_MODULES:
            module = importlib.import_module(module_name)
            for _, member in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(member, BaseValidator)
                    and member is not BaseValidator
                    and member.__module__ == module.__name__
                ):
                    self.register_validator(member)

        for entry_point in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            try:
                self.register_validator(entry_point.load())
            except (ImportError, AttributeError, ValueError) as e:
                logger.warning(f"Failed to load validator plugin {entry_point.name}: {e}")

        logger.debug(f"Loaded validators: {', '.join(sorted(self._validators))}")


validator_registry = ValidatorRegistry()


def register_validator(validator_class: Type[BaseValidator]) -> None:
    validator_registry.register_validator(validator_class)


def get_validator(rule_id: str) -> Optional[Type[BaseValidator]]:
    return validator_registry.get_validator(rule_id)


def get_all_validators() -> Dict[str, Type[BaseValidator]]:
    return validator_registry.get_all_validators()
