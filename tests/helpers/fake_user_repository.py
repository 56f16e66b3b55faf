"""In-memory implementation of ``UserRepositoryProtocol`` for tests.

Every call yields to the event loop once so that concurrent service calls
genuinely interleave; ``serialized`` holds an ``asyncio.Lock`` per role
the way the SQL repository holds row locks.
"""

import asyncio
import uuid
from collections import defaultdict
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from pmhub.core.role_policy import rank
from pmhub.models.user import User, UserRole


def make_user(
    role: UserRole = UserRole.MEMBER,
    *,
    name: str | None = None,
    email: str | None = None,
    department: str | None = None,
    is_active: bool = True,
    user_id: str | None = None,
) -> User:
    """Build a transient ``User`` with every column populated."""
    user_id = user_id or str(uuid.uuid4())
    short = user_id[:8]
    return User(
        id=user_id,
        name=name or f"{role.value.title()} {short}",
        email=email or f"{role.value.lower()}.{short}@pmhub.io",
        role=role,
        is_active=is_active,
        department=department,
        promoted_by_id=None,
        promoted_at=None,
    )


class FakeUserRepository:
    """Dict-backed user store."""

    def __init__(self, users: Sequence[User] = ()):
        self.users: dict[str, User] = {u.id: u for u in users}
        self._locks: dict[UserRole, asyncio.Lock] = defaultdict(asyncio.Lock)

    def add(self, user: User) -> User:
        self.users[user.id] = user
        return user

    async def get_by_id(self, user_id: str, *, for_update: bool = False) -> User | None:
        await asyncio.sleep(0)
        return self.users.get(str(user_id))

    async def get_active_by_id(self, user_id: str, *, for_update: bool = False) -> User | None:
        user = await self.get_by_id(user_id, for_update=for_update)
        if user is None or not user.is_active:
            return None
        return user

    async def list_users(
        self,
        *,
        role: UserRole | None = None,
        department: str | None = None,
        include_inactive: bool = False,
    ) -> list[User]:
        await asyncio.sleep(0)
        users = [
            u
            for u in self.users.values()
            if (include_inactive or u.is_active)
            and (role is None or u.role == role)
            and (department is None or u.department == department)
        ]
        return sorted(users, key=lambda u: (-rank(u.role), u.name, u.email))

    async def list_with_roles(
        self, roles: Sequence[UserRole], *, exclude_id: str | None = None
    ) -> list[User]:
        await asyncio.sleep(0)
        users = [
            u
            for u in self.users.values()
            if u.is_active and u.role in roles and u.id != exclude_id
        ]
        return sorted(users, key=lambda u: (-rank(u.role), u.name, u.email))

    async def count_by_role(self, role: UserRole, active_only: bool = True) -> int:
        await asyncio.sleep(0)
        return sum(
            1 for u in self.users.values() if u.role == role and (u.is_active or not active_only)
        )

    async def update_role(
        self,
        user_id: str,
        role: UserRole,
        *,
        promoted_by_id: str | None = None,
        clear_department: bool = False,
    ) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.role = role
        user.promoted_by_id = promoted_by_id
        user.promoted_at = datetime.now(UTC)
        if clear_department:
            user.department = None
        return user

    async def soft_delete(self, user_id: str) -> bool:
        user = await self.get_by_id(user_id)
        if user is None or not user.is_active:
            return False
        user.is_active = False
        return True

    @asynccontextmanager
    async def serialized(self, role: UserRole) -> AsyncIterator[int]:
        async with self._locks[UserRole(role)]:
            yield await self.count_by_role(role)
