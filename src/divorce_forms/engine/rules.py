"""Rule evaluator shared by visibility and requiredness.

Every conditional check in the system goes through ``evaluate_condition``.
"""

from typing import Any, Union

from ..models.enums import ConditionOperator
from ..models.responses import coerce_number, is_answered

OPERATOR_ALIASES = {
    "notEquals": ConditionOperator.NOT_EQUALS,
    "not_equals": ConditionOperator.NOT_EQUALS,
    "greaterThan": ConditionOperator.GREATER_THAN,
    "greater_than": ConditionOperator.GREATER_THAN,
    "lessThan": ConditionOperator.LESS_THAN,
    "less_than": ConditionOperator.LESS_THAN,
    "isEmpty": ConditionOperator.IS_EMPTY,
    "is_empty": ConditionOperator.IS_EMPTY,
    "isNotEmpty": ConditionOperator.IS_NOT_EMPTY,
    "is_not_empty": ConditionOperator.IS_NOT_EMPTY,
}


def parse_operator(name: Union[str, ConditionOperator]) -> ConditionOperator:
    """
    Resolve an operator name, accepting camelCase and snake_case aliases.

    Raises:
        ValueError: If the name is not a known operator.
    """
    if isinstance(name, ConditionOperator):
        return name
    if name in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[name]
    return ConditionOperator(name)


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def values_equal(stored: Any, comparison: Any) -> bool:
    """
    Compare a stored answer with a rule's comparison value.

    Numbers compare numerically when either side is a number, booleans
    compare as yes/no against strings, everything else compares as text.
    """
    if stored is None or comparison is None:
        return stored is None and comparison is None
    if isinstance(stored, bool) and isinstance(comparison, bool):
        return stored == comparison
    numeric_side = any(
        isinstance(v, (int, float)) and not isinstance(v, bool)
        for v in (stored, comparison)
    )
    if numeric_side:
        left, right = coerce_number(stored), coerce_number(comparison)
        if left is not None and right is not None:
            return left == right
    return _as_text(stored) == _as_text(comparison)


def evaluate_condition(
    operator: Union[str, ConditionOperator],
    stored: Any,
    comparison: Any = None
) -> bool:
    """
    Evaluate one condition.

    Args:
        operator: Operator or operator name.
        stored: Answer currently stored for the rule's source question.
        comparison: Value the rule compares against.

    Returns:
        True when the condition holds. Numeric comparisons against
        non-numeric values are False.
    """
    op = parse_operator(operator)

    if op is ConditionOperator.EQUALS:
        return values_equal(stored, comparison)
    if op is ConditionOperator.NOT_EQUALS:
        return not values_equal(stored, comparison)
    if op is ConditionOperator.CONTAINS:
        if isinstance(stored, list):
            return any(values_equal(item, comparison) for item in stored)
        if stored is None or comparison is None:
            return False
        return _as_text(comparison) in _as_text(stored)
    if op in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
        left, right = coerce_number(stored), coerce_number(comparison)
        if left is None or right is None:
            return False
        return left > right if op is ConditionOperator.GREATER_THAN else left < right
    if op is ConditionOperator.IS_EMPTY:
        return not is_answered(stored)
    if op is ConditionOperator.IS_NOT_EMPTY:
        return is_answered(stored)
    if op is ConditionOperator.IN:
        candidates = comparison if isinstance(comparison, (list, tuple)) else [comparison]
        if isinstance(stored, list):
            return any(values_equal(item, c) for item in stored for c in candidates)
        return any(values_equal(stored, c) for c in candidates)
    raise ValueError(f"Unhandled operator: {op}")
