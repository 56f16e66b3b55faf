"""Pydantic schemas package."""
from pmhub.schemas.auth import CurrentUserResponse, TokenUser
from pmhub.schemas.user import (
    AvailableRolesResponse,
    HierarchyGroup,
    HierarchyQuery,
    HierarchyResponse,
    PromotableUsersResponse,
    RoleChangeRequest,
    RoleChangeResponse,
    SuperAdminVerification,
    UserResponse,
)

__all__ = [
    # Auth schemas
    "TokenUser",
    "CurrentUserResponse",
    # User hierarchy schemas
    "UserResponse",
    "RoleChangeRequest",
    "RoleChangeResponse",
    "HierarchyQuery",
    "HierarchyGroup",
    "HierarchyResponse",
    "PromotableUsersResponse",
    "AvailableRolesResponse",
    "SuperAdminVerification",
]
