"""Authorization core - pure rule evaluation, no I/O."""

from parkaccess.domain.authorization.assignable import (
    ASSIGNABLE_PERMISSIONS,
    AssignablePermission,
    PermissionValidationResult,
    validate_permissions,
)
from parkaccess.domain.authorization.catalog import PermissionCatalog, build_default_catalog
from parkaccess.domain.authorization.conditions import evaluate_conditions, interpolate_value
from parkaccess.domain.authorization.resource_matcher import matches_resource
from parkaccess.domain.authorization.rls import (
    ALLOW_ALL,
    DENY_ALL,
    generate_rls_condition,
)

__all__ = [
    "ALLOW_ALL",
    "ASSIGNABLE_PERMISSIONS",
    "AssignablePermission",
    "DENY_ALL",
    "PermissionCatalog",
    "PermissionValidationResult",
    "build_default_catalog",
    "evaluate_conditions",
    "generate_rls_condition",
    "interpolate_value",
    "matches_resource",
    "validate_permissions",
]
