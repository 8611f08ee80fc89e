"""Default permission sets per user type."""

from collections.abc import Mapping
from types import MappingProxyType

from parkaccess.domain.entities import Condition, Permission
from parkaccess.domain.value_objects import ConditionOperator, PermissionAction, UserType

CRUD = (
    PermissionAction.CREATE,
    PermissionAction.READ,
    PermissionAction.UPDATE,
    PermissionAction.DELETE,
)
CREATE_READ_UPDATE = (PermissionAction.CREATE, PermissionAction.READ, PermissionAction.UPDATE)
CREATE_READ = (PermissionAction.CREATE, PermissionAction.READ)
READ_UPDATE = (PermissionAction.READ, PermissionAction.UPDATE)
READ_ONLY = (PermissionAction.READ,)

USER_ID = "{{userId}}"
OPERATOR_ID = "{{operatorId}}"


def _owned(
    resource: str,
    actions: tuple[PermissionAction, ...],
    field: str,
    token: str = USER_ID,
) -> Permission:
    return Permission(
        resource=resource,
        actions=actions,
        conditions=(Condition(field=field, operator=ConditionOperator.EQUALS, value=token),),
    )


def _participant(resource: str, actions: tuple[PermissionAction, ...]) -> Permission:
    return Permission(
        resource=resource,
        actions=actions,
        conditions=(
            Condition(field="participants", operator=ConditionOperator.CONTAINS, value=USER_ID),
        ),
    )


def _open(resource: str, actions: tuple[PermissionAction, ...]) -> Permission:
    return Permission(resource=resource, actions=actions)


class PermissionCatalog:
    """Immutable, ordered role defaults keyed by user type."""

    def __init__(self, entries: Mapping[UserType, tuple[Permission, ...]]) -> None:
        self._entries = MappingProxyType({UserType(k): tuple(v) for k, v in entries.items()})

    def for_user_type(self, user_type: UserType | str) -> tuple[Permission, ...]:
        """Default permissions for the user type, empty for unknown types."""
        try:
            return self._entries.get(UserType(user_type), ())
        except ValueError:
            return ()

    def user_types(self) -> tuple[UserType, ...]:
        return tuple(self._entries)


def build_default_catalog() -> PermissionCatalog:
    """Day-one tenancy model of the marketplace."""
    location_owner = "operator_id"
    section_owner = "location.operator_id"
    zone_owner = "section.location.operator_id"
    spot_owner = "zone.section.location.operator_id"
    booking_owner = "spot.zone.section.location.operator_id"

    return PermissionCatalog(
        {
            UserType.ADMIN: (_open("*", CRUD),),
            UserType.OPERATOR: (
                _owned("locations", CRUD, location_owner),
                _owned("sections", CRUD, section_owner),
                _owned("zones", CRUD, zone_owner),
                _owned("parking_spots", CRUD, spot_owner),
                _owned("bookings", READ_UPDATE, booking_owner),
                _owned("user_groups", CRUD, "operator_id"),
                _open("reports", READ_ONLY),
                _open("analytics", READ_ONLY),
            ),
            # POS acts on behalf of its operator, hence operatorId
            UserType.POS: (
                _owned("bookings", CREATE_READ_UPDATE, booking_owner, OPERATOR_ID),
                _owned("parking_spots", READ_UPDATE, spot_owner, OPERATOR_ID),
                _owned(
                    "violation_reports", CREATE_READ_UPDATE, "location.operator_id", OPERATOR_ID
                ),
                _open("vehicles", READ_ONLY),
                _open("users", READ_ONLY),
            ),
            UserType.HOST: (
                _owned("hosted_listings", CRUD, "host_id"),
                _owned("bookings", READ_UPDATE, "spot.hosted_listing.host_id"),
                _participant("messages", CREATE_READ_UPDATE),
                _owned("ratings", CREATE_READ, "booking.spot.hosted_listing.host_id"),
                _open("host_payouts", READ_ONLY),
            ),
            UserType.CLIENT: (
                _owned("bookings", CREATE_READ_UPDATE, "user_id"),
                _owned("vehicles", CRUD, "user_id"),
                _owned("user_profiles", READ_UPDATE, "user_id"),
                _participant("messages", CREATE_READ_UPDATE),
                _owned("ratings", CREATE_READ, "rater_id"),
                _owned("violation_reports", CREATE_READ, "reporter_id"),
                _open("locations", READ_ONLY),
                _open("sections", READ_ONLY),
                _open("zones", READ_ONLY),
                _open("parking_spots", READ_ONLY),
                _open("hosted_listings", READ_ONLY),
            ),
        }
    )
