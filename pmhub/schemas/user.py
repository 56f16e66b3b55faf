"""Pydantic schemas for the user hierarchy endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pmhub.models.user import UserRole


class UserResponse(BaseModel):
    """Public user information."""

    id: str
    email: EmailStr
    name: str
    role: UserRole
    is_active: bool = True
    department: str | None = None
    promoted_by_id: str | None = None
    promoted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleChangeRequest(BaseModel):
    """Body of ``POST /users/{user_id}/promote`` and ``/demote``."""

    new_role: UserRole = Field(..., alias="newRole")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class HierarchyQuery(BaseModel):
    """Query parameters accepted by ``GET /users/hierarchy``."""

    role: UserRole | None = None
    department: str | None = Field(None, min_length=1, max_length=100)
    include_inactive: bool = False

    model_config = ConfigDict(extra="forbid")


class HierarchyGroup(BaseModel):
    """Users sharing a role."""

    role: UserRole
    rank: int
    users: list[UserResponse]


class HierarchyResponse(BaseModel):
    """All users grouped by role, highest rank first."""

    groups: list[HierarchyGroup]
    total: int


class PromotableUsersResponse(BaseModel):
    users: list[UserResponse]


class AvailableRolesResponse(BaseModel):
    roles: list[UserRole]


class SuperAdminVerification(BaseModel):
    """Current number of active SUPER_ADMIN users and what it allows."""

    count: int
    is_safe: bool
    can_remove_one: bool


class RoleChangeResponse(BaseModel):
    """Result of a promotion or demotion."""

    message: str
    user: UserResponse
