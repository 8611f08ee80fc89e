"""Comparison operators for permission conditions."""

from enum import StrEnum


class ConditionOperator(StrEnum):
    """Operators a permission condition can apply to a resource field."""

    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    IN = "in"
    NOT_IN = "not_in"
