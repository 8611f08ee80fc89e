"""Resources that can be granted through user groups, and payload validation."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from parkaccess.domain.entities import Permission
from parkaccess.domain.value_objects import ConditionOperator, PermissionAction

_ALL = (
    PermissionAction.CREATE,
    PermissionAction.READ,
    PermissionAction.UPDATE,
    PermissionAction.DELETE,
)


@dataclass(frozen=True)
class AssignablePermission:
    """A resource administrators may grant and the actions it supports."""

    resource: str
    actions: tuple[PermissionAction, ...]
    description: str


@dataclass
class PermissionValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


ASSIGNABLE_PERMISSIONS: tuple[AssignablePermission, ...] = (
    AssignablePermission("users", _ALL, "Manage admin and staff users"),
    AssignablePermission("operators", _ALL, "Manage parking operators"),
    AssignablePermission("locations", _ALL, "Manage parking locations and hierarchy"),
    AssignablePermission("bookings", _ALL, "Manage parking bookings and sessions"),
    AssignablePermission("payments", _ALL, "Manage payments and financial transactions"),
    AssignablePermission("reports", _ALL, "Generate and manage reports"),
    AssignablePermission("advertisements", _ALL, "Manage advertisement system"),
    AssignablePermission("api_management", _ALL, "Manage third-party API integrations"),
    AssignablePermission("settings", _ALL, "Manage system settings and configuration"),
    AssignablePermission("audit_logs", (PermissionAction.READ,), "View audit logs and system events"),
)

_BY_RESOURCE = {p.resource: p for p in ASSIGNABLE_PERMISSIONS}
_OPERATORS = {o.value for o in ConditionOperator}


def _as_mapping(permission: Permission | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(permission, Permission):
        return permission.to_dict()
    return permission


def validate_permissions(
    permissions: Iterable[Permission | Mapping[str, Any]],
) -> PermissionValidationResult:
    """Check resources, actions and condition operators. Never raises on bad input."""
    errors: list[str] = []
    for raw in permissions:
        if not isinstance(raw, (Permission, Mapping)):
            errors.append(f"Invalid permission entry: {raw!r}")
            continue
        permission = _as_mapping(raw)
        resource = permission.get("resource")
        assignable = _BY_RESOURCE.get(resource) if isinstance(resource, str) else None
        if assignable is None:
            errors.append(f"Invalid resource: {resource}")
            continue

        actions = permission.get("actions")
        if not isinstance(actions, (list, tuple)) or not actions:
            errors.append(f"Missing actions for {resource}")
        else:
            allowed = {a.value for a in assignable.actions}
            invalid = [str(a) for a in actions if str(a) not in allowed]
            if invalid:
                errors.append(f"Invalid actions for {resource}: {', '.join(invalid)}")

        conditions = permission.get("conditions") or []
        if not isinstance(conditions, (list, tuple)):
            errors.append(f"Invalid conditions for {resource}")
            continue
        for condition in conditions:
            operator = condition.get("operator") if isinstance(condition, Mapping) else None
            if not isinstance(operator, str) or operator not in _OPERATORS:
                errors.append(f"Invalid condition operator: {operator}")
            elif not isinstance(condition.get("field"), str) or "value" not in condition:
                errors.append(f"Incomplete condition for {resource}")

    return PermissionValidationResult(is_valid=not errors, errors=errors)
