"""Domain errors raised by the hierarchy policy and service.

Each error carries the HTTP status it maps to so the API layer can
translate it without knowing about individual error types.
"""

from fastapi import status


class HierarchyError(Exception):
    """Base class for user hierarchy errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Hierarchy operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InsufficientPrivilege(HierarchyError):
    """Actor does not hold authority over the target or requested role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient privilege for this operation"


class SelfOperationForbidden(HierarchyError):
    """Actor attempted an operation on their own account that is not allowed."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You cannot perform this operation on your own account"


class NotFound(HierarchyError):
    """Actor or target user does not exist (or is no longer active)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class LastSuperAdminViolation(HierarchyError):
    """Operation would leave the system without an active SUPER_ADMIN."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "At least one active SUPER_ADMIN must remain"


class InvalidRoleTransition(HierarchyError):
    """Requested role does not move the target in the requested direction."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid role transition"
