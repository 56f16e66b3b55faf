"""Protocol definitions for repository interfaces.

These protocols enable type-safe fakes in tests and decouple service
layer code from concrete SQLAlchemy implementations.
"""

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from pmhub.models.user import User, UserRole


class UserRepositoryProtocol(Protocol):
    """Interface for user storage."""

    async def get_by_id(self, user_id: str, *, for_update: bool = False) -> User | None: ...

    async def get_active_by_id(
        self, user_id: str, *, for_update: bool = False
    ) -> User | None: ...

    async def list_users(
        self,
        *,
        role: UserRole | None = None,
        department: str | None = None,
        include_inactive: bool = False,
    ) -> list[User]: ...

    async def list_with_roles(
        self, roles: Sequence[UserRole], *, exclude_id: str | None = None
    ) -> list[User]: ...

    async def count_by_role(self, role: UserRole, active_only: bool = True) -> int: ...

    async def update_role(
        self,
        user_id: str,
        role: UserRole,
        *,
        promoted_by_id: str | None = None,
        clear_department: bool = False,
    ) -> User | None: ...

    async def soft_delete(self, user_id: str) -> bool: ...

    def serialized(self, role: UserRole) -> AbstractAsyncContextManager[int]:
        """Serialize check-then-mutate sequences for *role*.

        Yields the number of active users holding *role* as observed
        while the lock is held.
        """
        ...
