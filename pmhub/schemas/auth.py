"""Pydantic schemas for authentication."""

from pydantic import BaseModel

from pmhub.core.permissions import Permission
from pmhub.models.user import UserRole


class TokenUser(BaseModel):
    """Lightweight user representation from JWT claims. No DB query needed."""

    id: str
    role: UserRole
    name: str = ""
    email: str = ""


class CurrentUserResponse(BaseModel):
    """Authenticated user with the permissions granted by their role."""

    id: str
    name: str = ""
    email: str = ""
    role: UserRole
    permissions: list[Permission]
