"""User types of the parking marketplace."""

from enum import StrEnum


class UserType(StrEnum):
    """Kind of account; selects the default permission set."""

    ADMIN = "admin"
    OPERATOR = "operator"
    POS = "pos"
    HOST = "host"
    CLIENT = "client"
