"""Core business logic."""
from pmhub.core.permissions import Permission, has_permission, permissions_for
from pmhub.core.role_policy import (
    ROLE_ORDER,
    Allowed,
    Denied,
    assignable_roles,
    can_demote,
    can_promote,
    can_remove,
    outranks,
    rank,
)

__all__ = [
    "ROLE_ORDER",
    "Allowed",
    "Denied",
    "Permission",
    "assignable_roles",
    "can_demote",
    "can_promote",
    "can_remove",
    "has_permission",
    "outranks",
    "permissions_for",
    "rank",
]
