"""Permission entity - a resource pattern, allowed actions and scoping conditions."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from parkaccess.domain.value_objects import ConditionOperator, PermissionAction

ConditionValue = str | int | float | tuple


@dataclass(frozen=True)
class Condition:
    """Predicate on a dot-path field of the resource data.

    String values may carry ``{{userId}}``, ``{{operatorId}}`` and
    ``{{resourceId}}`` tokens, filled in from the caller's context.
    """

    field: str
    operator: ConditionOperator
    value: ConditionValue

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Condition":
        """Build from stored/API representation. Raises ValueError on bad shape."""
        try:
            field_path = data["field"]
            operator = ConditionOperator(data["operator"])
            value = data["value"]
        except KeyError as e:
            raise ValueError(f"Condition is missing {e}") from e
        if isinstance(value, list):
            value = tuple(value)
        return cls(field=str(field_path), operator=operator, value=value)

    def to_dict(self) -> dict[str, Any]:
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {"field": self.field, "operator": self.operator.value, "value": value}


@dataclass(frozen=True)
class Permission:
    """Grants ``actions`` on resources matching ``resource`` when all conditions hold."""

    resource: str
    actions: tuple[PermissionAction, ...]
    conditions: tuple[Condition, ...] = ()

    @classmethod
    def of(
        cls,
        resource: str,
        actions: Iterable[PermissionAction | str],
        conditions: Iterable[Condition] = (),
    ) -> "Permission":
        """Convenience constructor accepting any iterables."""
        return cls(
            resource=resource,
            actions=tuple(PermissionAction(a) for a in actions),
            conditions=tuple(conditions),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Permission":
        """Build from stored/API representation. Raises ValueError on bad shape."""
        try:
            resource = data["resource"]
            actions = data["actions"]
        except KeyError as e:
            raise ValueError(f"Permission is missing {e}") from e
        if isinstance(actions, str):
            raise ValueError("Permission actions must be a list")
        conditions = data.get("conditions") or []
        return cls.of(
            resource=str(resource),
            actions=actions,
            conditions=[Condition.from_dict(c) for c in conditions],
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "resource": self.resource,
            "actions": [a.value for a in self.actions],
        }
        if self.conditions:
            data["conditions"] = [c.to_dict() for c in self.conditions]
        return data

    def allows(self, action: PermissionAction) -> bool:
        return action in self.actions
