"""Static role to permission mapping.

Permissions are never persisted. Each role holds its own grants plus
every grant of the roles below it.
"""

from enum import StrEnum

from pmhub.core.role_policy import ROLE_ORDER, rank
from pmhub.models.user import UserRole


class Permission(StrEnum):
    """Named capabilities resolved from a user's role."""

    VIEW_PROJECTS = "VIEW_PROJECTS"
    CREATE_PROJECT = "CREATE_PROJECT"
    EDIT_PROJECT = "EDIT_PROJECT"
    DELETE_PROJECT = "DELETE_PROJECT"
    CREATE_TASK = "CREATE_TASK"
    EDIT_TASK = "EDIT_TASK"
    ASSIGN_TASK = "ASSIGN_TASK"
    APPROVE_TASK = "APPROVE_TASK"
    DELETE_TASK = "DELETE_TASK"
    VIEW_USERS = "VIEW_USERS"
    MANAGE_USERS = "MANAGE_USERS"
    VIEW_AUDIT_LOGS = "VIEW_AUDIT_LOGS"
    MANAGE_SYSTEM = "MANAGE_SYSTEM"


# Grants introduced at each level; lower levels are inherited.
_ROLE_GRANTS: dict[UserRole, frozenset[Permission]] = {
    UserRole.MEMBER: frozenset(
        {
            Permission.VIEW_PROJECTS,
            Permission.CREATE_TASK,
            Permission.EDIT_TASK,
            Permission.VIEW_USERS,
        }
    ),
    UserRole.MANAGER: frozenset(
        {
            Permission.CREATE_PROJECT,
            Permission.EDIT_PROJECT,
            Permission.ASSIGN_TASK,
            Permission.APPROVE_TASK,
            Permission.DELETE_TASK,
            Permission.MANAGE_USERS,
        }
    ),
    UserRole.ADMIN: frozenset(
        {
            Permission.DELETE_PROJECT,
            Permission.VIEW_AUDIT_LOGS,
        }
    ),
    UserRole.SUPER_ADMIN: frozenset({Permission.MANAGE_SYSTEM}),
}


def _resolve() -> dict[UserRole, frozenset[Permission]]:
    resolved: dict[UserRole, frozenset[Permission]] = {}
    for role in ROLE_ORDER:
        inherited = frozenset().union(
            *(grants for r, grants in _ROLE_GRANTS.items() if rank(r) <= rank(role))
        )
        resolved[role] = inherited
    return resolved


ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = _resolve()


def permissions_for(role: str | UserRole) -> frozenset[Permission]:
    """Return every permission held by *role*."""
    return ROLE_PERMISSIONS[UserRole(role)]


def has_permission(role: str | UserRole, permission: Permission) -> bool:
    """Check whether *role* holds *permission*."""
    return permission in permissions_for(role)
