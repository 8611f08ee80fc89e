"""Condition evaluation against resource data."""

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from parkaccess.domain.entities import AuthorizationContext, Condition
from parkaccess.domain.value_objects import ConditionOperator

_TOKEN_PATTERN = re.compile(r"\{\{(userId|operatorId|resourceId)\}\}")


class _Unresolved:
    """Marker for a condition value whose token has no value in the context."""

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()


def get_nested_value(data: Any, path: str) -> Any:
    """Follow a dot path through mappings and sequences. Missing keys give None."""
    current = data
    for key in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not key.isdigit() or int(key) >= len(current):
                return None
            current = current[int(key)]
        else:
            return None
        if current is None:
            return None
    return current


def _token_values(context: AuthorizationContext) -> dict[str, str | None]:
    return {
        "userId": context.user_id,
        "operatorId": context.operator_id,
        "resourceId": context.resource_id,
    }


def interpolate_value(value: Any, context: AuthorizationContext) -> Any:
    """Replace context tokens in a string value in a single pass.

    Substituted text is never scanned again. Returns UNRESOLVED when a token
    refers to a context value that is not set. Non-strings pass through.
    """
    if not isinstance(value, str):
        return value
    values = _token_values(context)
    if any(values[name] is None for name in _TOKEN_PATTERN.findall(value)):
        return UNRESOLVED
    return _TOKEN_PATTERN.sub(lambda m: str(values[m.group(1)]), value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strictly_equal(left: Any, right: Any) -> bool:
    """Equality without type coercion: "5" != 5, True != 1, 5 == 5.0."""
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if left is None or right is None:
        return left is right
    return type(left) is type(right) and left == right


def to_number(value: Any) -> float:
    """Numeric coercion; unparsable and absent values become NaN."""
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def to_text(value: Any) -> str:
    """String coercion used by substring checks."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _member(value: Any, collection: Iterable[Any]) -> bool:
    return any(strictly_equal(item, value) for item in collection)


def evaluate_condition(
    field_value: Any, operator: ConditionOperator, condition_value: Any
) -> bool:
    """Apply one operator to an already resolved field and condition value."""
    if condition_value is UNRESOLVED:
        return False
    match ConditionOperator(operator):
        case ConditionOperator.EQUALS:
            return strictly_equal(field_value, condition_value)
        case ConditionOperator.GREATER_THAN:
            return to_number(field_value) > to_number(condition_value)
        case ConditionOperator.LESS_THAN:
            return to_number(field_value) < to_number(condition_value)
        case ConditionOperator.CONTAINS:
            if field_value is None:
                return False
            if _is_collection(field_value):
                return _member(condition_value, field_value)
            return to_text(condition_value) in to_text(field_value)
        case ConditionOperator.IN:
            return _is_collection(condition_value) and _member(field_value, condition_value)
        case ConditionOperator.NOT_IN:
            return _is_collection(condition_value) and not _member(
                field_value, condition_value
            )


def evaluate_conditions(
    conditions: Iterable[Condition],
    context: AuthorizationContext,
    resource_data: Any,
) -> bool:
    """All conditions must hold; stops at the first one that does not."""
    for condition in conditions:
        field_value = get_nested_value(resource_data, condition.field)
        condition_value = interpolate_value(condition.value, context)
        if not evaluate_condition(field_value, condition.operator, condition_value):
            return False
    return True
