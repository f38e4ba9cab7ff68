# src/formflow/core/logic.py
"""Conditional logic rule evaluation.

Rules compare the bound value of one field against a literal:

    {element_id: 3, operator: eq, value: "Yes"}

A rule set matches when all rules match (match: all) or at least one
matches (match: any). The action then decides the outcome: ``show``
passes when the set matches, ``hide`` passes when it does not.

Used for element visibility, notification gating and confirmation choice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from formflow.contracts.enums import FieldKind, LogicAction, LogicMatch, LogicOperator
from formflow.core.elements import Field

if TYPE_CHECKING:
    from formflow.core.config import LogicRuleSettings, LogicSettings
    from formflow.core.form import Form


def _as_number(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def _compare_text(operator: LogicOperator, actual: str, expected: str) -> bool:
    match operator:
        case LogicOperator.EQ:
            return actual == expected
        case LogicOperator.NEQ:
            return actual != expected
        case LogicOperator.GT | LogicOperator.LT:
            left, right = _as_number(actual), _as_number(expected)
            if left is None or right is None:
                return False
            return left > right if operator == LogicOperator.GT else left < right
        case LogicOperator.CONTAINS:
            return expected in actual
        case LogicOperator.STARTS_WITH:
            return actual.startswith(expected)
        case LogicOperator.ENDS_WITH:
            return actual.endswith(expected)
        case _:
            return False


def field_matches(field: Field, operator: LogicOperator, expected: str) -> bool:
    """Evaluate one operator against a field's current value."""
    if operator == LogicOperator.EMPTY:
        return field.is_empty()
    if operator == LogicOperator.NOT_EMPTY:
        return not field.is_empty()

    if field.kind == FieldKind.MULTI:
        # Multi-valued fields compare option membership
        if operator == LogicOperator.EQ:
            return field.has_value(expected)
        if operator == LogicOperator.NEQ:
            return not field.has_value(expected)
        return any(_compare_text(operator, option, expected) for option in field.value)

    return _compare_text(operator, field.value_text(), expected)


def rule_matches(rule: LogicRuleSettings, form: Form) -> bool:
    """Whether a single rule holds.

    Rules pointing at a missing, non-field or conditionally hidden element
    never match.
    """
    element = form.get_element_by_id(rule.element_id)
    if not isinstance(element, Field) or element.is_hidden():
        return False
    return field_matches(element, rule.operator, rule.value)


def check_logic_action(logic: LogicSettings, form: Form) -> bool:
    """Evaluate a rule set and apply its show/hide action.

    Returns:
        True when the owner should be shown (or the notification sent,
        or the confirmation chosen).
    """
    results = (rule_matches(rule, form) for rule in logic.rules)
    matched = all(results) if logic.match == LogicMatch.ALL else any(results)
    return matched if logic.action == LogicAction.SHOW else not matched
