"""Resource pattern matching."""

WILDCARD = "*"


def matches_resource(permission_resource: str, requested_resource: str) -> bool:
    """Check if a permission's resource pattern covers the requested resource.

    ``"*"`` matches everything, otherwise exact match, otherwise a pattern
    ending in ``*`` matches any resource starting with the part before it
    (``"locations.*"`` matches ``"locations.sections"``).
    """
    if permission_resource == WILDCARD:
        return True
    if permission_resource == requested_resource:
        return True
    if permission_resource.endswith(WILDCARD):
        return requested_resource.startswith(permission_resource[:-1])
    return False
