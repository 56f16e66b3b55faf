"""Database repositories for data access."""
from pmhub.repositories.user_repository import UserRepository

__all__ = [
    "UserRepository",
]
