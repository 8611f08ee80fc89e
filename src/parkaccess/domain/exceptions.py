"""Domain exceptions."""


class ParkAccessError(Exception):
    """Base exception for ParkAccess."""

    pass


class PermissionDenied(ParkAccessError):
    """User does not have permission for the requested action."""

    pass


class NotFound(ParkAccessError):
    """Requested entity was not found."""

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class AlreadyMember(ParkAccessError):
    """User is already a member of the group."""

    def __init__(self, user_id: str, group_id: str) -> None:
        super().__init__(f"User {user_id} is already a member of group {group_id}")
        self.user_id = user_id
        self.group_id = group_id


class ValidationError(ParkAccessError):
    """Validation failed for input data."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
