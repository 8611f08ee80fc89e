"""Application ports - interfaces for external adapters."""

from parkaccess.application.ports.permission_checker import PermissionChecker
from parkaccess.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "PermissionChecker",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
