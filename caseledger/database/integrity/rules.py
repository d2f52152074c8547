#!/usr/bin/env python3
"""
rules.py
--------
Validation rules and the registry that orders them.

A rule is a named, prioritized function of (entity, context) returning a
list of IntegrityIssue (or None for "nothing to report"). Rules are
indexed by the entity type they apply to and evaluated in descending
priority; rules of equal priority run in registration order.
Registering a rule under an existing name replaces the old rule.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from caseledger.core.exceptions import RuleRegistrationError, ValidationError
from caseledger.core.validators import DataValidator
from caseledger.database.models.enums import EntityType
from .issues import IntegrityIssue

RuleFunction = Callable[[Any, Any], Optional[List[IntegrityIssue]]]


@dataclass
class ValidationRule:
    """
    A named check of one entity type.

    Attributes:
        name: Unique rule name
        description: What the rule checks
        entity_type: Entity type the rule applies to
        priority: Higher runs first
        validate: Function (entity, ValidationContext) -> issues
        dependencies: Names of rules this one builds on (informational)
        strict_only: Skipped when the context's validation level is lenient
    """

    name: str
    description: str
    entity_type: EntityType
    priority: int
    validate: RuleFunction
    dependencies: Sequence[str] = ()
    strict_only: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "entity_type": self.entity_type.value,
            "priority": self.priority,
            "dependencies": list(self.dependencies),
            "strict_only": self.strict_only,
        }


class RuleRegistry:
    """Rules by name, with a per-entity-type evaluation order."""

    def __init__(self, rules: Optional[Sequence[ValidationRule]] = None):
        self._rules: Dict[str, ValidationRule] = {}
        self._sequence: Dict[str, int] = {}
        self._by_type: Dict[EntityType, List[ValidationRule]] = {}
        self._counter = itertools.count()
        for rule in rules or ():
            self.register(rule)

    @staticmethod
    def _check(rule: ValidationRule) -> None:
        if not isinstance(rule, ValidationRule):
            raise RuleRegistrationError(
                f"Expected a ValidationRule, got {type(rule).__name__}"
            )
        if not isinstance(rule.name, str) or not rule.name.strip():
            raise RuleRegistrationError("Rule name must be a non-empty string")
        try:
            rule.entity_type = DataValidator.normalize_enum(rule.entity_type, EntityType)
        except ValidationError as e:
            raise RuleRegistrationError(f"Rule '{rule.name}': {e}") from e
        if not isinstance(rule.priority, int) or isinstance(rule.priority, bool):
            raise RuleRegistrationError(f"Rule '{rule.name}': priority must be an integer")
        if not callable(rule.validate):
            raise RuleRegistrationError(f"Rule '{rule.name}': validate must be callable")

    def _reindex(self, entity_type: EntityType) -> None:
        rules = [r for r in self._rules.values() if r.entity_type is entity_type]
        rules.sort(key=lambda r: (-r.priority, self._sequence[r.name]))
        if rules:
            self._by_type[entity_type] = rules
        else:
            self._by_type.pop(entity_type, None)

    def register(self, rule: ValidationRule) -> Optional[ValidationRule]:
        """
        Add a rule, replacing any rule of the same name.

        A replacement takes the position of a newly registered rule among
        rules of equal priority.

        Returns:
            The replaced rule, if any

        Raises:
            RuleRegistrationError: If the rule is malformed
        """
        self._check(rule)
        replaced = self._rules.pop(rule.name, None)
        self._rules[rule.name] = rule
        self._sequence[rule.name] = next(self._counter)
        if replaced is not None and replaced.entity_type is not rule.entity_type:
            self._reindex(replaced.entity_type)
        self._reindex(rule.entity_type)
        return replaced

    def unregister(self, name: str) -> bool:
        """Remove a rule by name. Returns False if there was none."""
        rule = self._rules.pop(name, None)
        if rule is None:
            return False
        del self._sequence[name]
        self._reindex(rule.entity_type)
        return True

    def rules_for(self, entity_type: Any) -> List[ValidationRule]:
        """Rules of an entity type in evaluation order."""
        entity_type = DataValidator.normalize_enum(entity_type, EntityType)
        return list(self._by_type.get(entity_type, []))

    def all_rules(self) -> List[ValidationRule]:
        """All rules in registration order."""
        return sorted(self._rules.values(), key=lambda r: self._sequence[r.name])

    def missing_dependencies(self) -> Dict[str, List[str]]:
        """Rules naming dependencies that are not registered."""
        missing: Dict[str, List[str]] = {}
        for rule in self.all_rules():
            absent = [dep for dep in rule.dependencies if dep not in self._rules]
            if absent:
                missing[rule.name] = absent
        return missing

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)
