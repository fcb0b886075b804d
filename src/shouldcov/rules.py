"""
Rule policy for shouldcov.

Applies the ``[tool.shouldcov.rules]`` table to the registered validators:
a rule can be turned off, kept at its default, or given another severity.

shouldcov/src/shouldcov/rules.py
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .plugin_system import BaseValidator, Severity
from .validators.registry import validator_registry

__all__ = ["RuleEngine"]

logger = logging.getLogger(__name__)


class RuleEngine:
    """Decides which validators run and at what severity."""

    def __init__(self, config: Mapping[str, Any]):
        """
        Args:
            config: Settings from the [tool.shouldcov] section (a dict or a Config)
        """
        self.config = config
        self._rule_overrides: Dict[str, Severity] = self._parse_overrides(config.get("rules", {}))

    @staticmethod
    def _parse_overrides(rules_config: Any) -> Dict[str, Severity]:
        if not isinstance(rules_config, dict):
            logger.warning("Configuration key 'rules' in [tool.shouldcov] is not a table. Ignoring it.")
            return {}

        overrides = {}
        for rule_id, setting in rules_config.items():
            if not isinstance(setting, (str, bool)):
                logger.warning(f"Setting for rule {rule_id} must be a severity or a boolean; ignoring it.")
                continue
            try:
                severity = Severity.from_setting(setting)
            except ValueError:
                logger.warning(f"Invalid severity '{setting}' for rule {rule_id}; ignoring it.")
                continue
            if severity is not None:
                overrides[rule_id] = severity
        return overrides

    def is_rule_enabled(self, rule_id: str) -> bool:
        return self._rule_overrides.get(rule_id) != Severity.OFF

    def get_rule_severity(self, rule_id: str, default: Severity = Severity.WARN) -> Severity:
        return self._rule_overrides.get(rule_id, default)

    def create_validator_instance(
        self, validator_class: type[BaseValidator], **resources: Any
    ) -> Optional[BaseValidator]:
        """
        Instantiate a validator at its configured severity.

        Args:
            validator_class: Validator class to instantiate
            resources: Shared objects (coverage engine, project root), handed
                only to validators that set ``needs_coverage_engine``

        Returns:
            The validator, or None if its rule is turned off
        """
        rule_id = validator_class.rule_id
        if not self.is_rule_enabled(rule_id):
            logger.debug(f"Rule {rule_id} is turned off")
            return None

        kwargs = dict(resources) if validator_class.needs_coverage_engine else {}
        return validator_class(
            severity=self.get_rule_severity(rule_id, validator_class.default_severity),
            config=self.config,
            **kwargs,
        )

    def get_enabled_validators(self, **resources: Any) -> List[BaseValidator]:
        validators = []
        for validator_class in validator_registry.get_all_validators().values():
            instance = self.create_validator_instance(validator_class, **resources)
            if instance is not None:
                validators.append(instance)
        return validators
