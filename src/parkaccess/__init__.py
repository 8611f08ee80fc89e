"""ParkAccess - role and condition based authorization for the parking marketplace."""

__version__ = "0.1.0"
