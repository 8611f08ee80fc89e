"""Row-level security predicates derived from the permission catalog.

The predicate is a PostgreSQL ``WHERE`` fragment for the data store's RLS
layer. Anything that cannot be translated denies.
"""

import re

from parkaccess.domain.authorization.catalog import PermissionCatalog
from parkaccess.domain.authorization.resource_matcher import matches_resource
from parkaccess.domain.entities import Condition
from parkaccess.domain.value_objects import ConditionOperator, PermissionAction, UserType

ALLOW_ALL = "true"
DENY_ALL = "false"

_TOKEN_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def _column(field: str) -> str:
    return field.replace(".", "_")


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _resolve_value(condition: Condition, tokens: dict[str, str]) -> str | None:
    if isinstance(condition.value, tuple):
        return None
    value = _TOKEN_PATTERN.sub(
        lambda m: tokens.get(m.group(1), m.group(0)), str(condition.value)
    )
    if _TOKEN_PATTERN.search(value):
        return None
    return value


def _translate(condition: Condition, tokens: dict[str, str]) -> str:
    value = _resolve_value(condition, tokens)
    if value is None:
        return DENY_ALL
    column = _column(condition.field)
    match condition.operator:
        case ConditionOperator.EQUALS:
            return f"{column} = {_quote(value)}"
        case ConditionOperator.CONTAINS if "participants" in column:
            return f"{_quote(value)} = ANY({column})"
        case ConditionOperator.CONTAINS:
            return f"{column} ILIKE {_quote('%' + _escape_like(value) + '%')}"
        case _:
            return DENY_ALL


def generate_rls_condition(
    catalog: PermissionCatalog,
    user_type: UserType | str,
    user_id: str,
    resource: str,
    action: PermissionAction | str,
    *,
    operator_id: str | None = None,
) -> str:
    """Predicate enforcing the first matching default permission at the data layer."""
    if user_type == UserType.ADMIN:
        return ALLOW_ALL

    permission = next(
        (
            p
            for p in catalog.for_user_type(user_type)
            if matches_resource(p.resource, resource) and action in p.actions
        ),
        None,
    )
    if permission is None or not permission.conditions:
        return DENY_ALL

    tokens = {"userId": user_id}
    if operator_id is not None:
        tokens["operatorId"] = operator_id

    clauses = [_translate(c, tokens) for c in permission.conditions]
    if DENY_ALL in clauses:
        return DENY_ALL
    return " AND ".join(clauses)
