"""Database models package."""

from pmhub.models.base import Base
from pmhub.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    # Models
    "User",
    # Enums
    "UserRole",
]
