"""Repository for user data access."""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pmhub.core.role_policy import ROLE_RANKS
from pmhub.models.user import User, UserRole

# SQL expression ranking users by role, used for hierarchy ordering
_ROLE_RANK = case(dict(ROLE_RANKS), value=User.role, else_=0)


class UserRepository:
    """Async data access layer for users.

    Writes call ``session.flush()`` only; the request-scoped session
    dependency owns the commit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str, *, for_update: bool = False) -> User | None:
        """Get a user by ID, active or not."""
        query = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_active_by_id(self, user_id: str, *, for_update: bool = False) -> User | None:
        """Get a user by ID, returning ``None`` for deactivated accounts."""
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
        """List users ordered by role rank (highest first), then name."""
        query = select(User)
        if not include_inactive:
            query = query.where(User.is_active.is_(True))
        if role is not None:
            query = query.where(User.role == role)
        if department is not None:
            query = query.where(User.department == department)
        query = query.order_by(_ROLE_RANK.desc(), User.name, User.email)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_with_roles(
        self, roles: Sequence[UserRole], *, exclude_id: str | None = None
    ) -> list[User]:
        """List active users whose role is one of *roles*."""
        if not roles:
            return []
        query = select(User).where(User.is_active.is_(True), User.role.in_(list(roles)))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        query = query.order_by(_ROLE_RANK.desc(), User.name, User.email)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_by_role(self, role: UserRole, active_only: bool = True) -> int:
        """Count users holding *role*."""
        query = select(func.count()).select_from(User).where(User.role == role)
        if active_only:
            query = query.where(User.is_active.is_(True))
        return await self.session.scalar(query) or 0

    async def update_role(
        self,
        user_id: str,
        role: UserRole,
        *,
        promoted_by_id: str | None = None,
        clear_department: bool = False,
    ) -> User | None:
        """Assign *role* to a user and record who changed it."""
        user = await self.get_by_id(user_id, for_update=True)
        if not user:
            return None

        user.role = role
        user.promoted_by_id = promoted_by_id
        user.promoted_at = datetime.now(UTC)
        if clear_department:
            user.department = None

        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def soft_delete(self, user_id: str) -> bool:
        """Deactivate a user. Deactivated users drop out of role counts."""
        user = await self.get_by_id(user_id, for_update=True)
        if not user or not user.is_active:
            return False

        user.is_active = False
        await self.session.flush()
        return True

    @asynccontextmanager
    async def serialized(self, role: UserRole) -> AsyncIterator[int]:
        """Lock every active user holding *role* until the transaction ends.

        Concurrent callers block on ``SELECT ... FOR UPDATE`` and, once the
        first transaction commits, re-read the reduced row set. Rows are
        locked in primary-key order so two callers cannot deadlock.
        """
        result = await self.session.execute(
            select(User.id)
            .where(User.role == role, User.is_active.is_(True))
            .order_by(User.id)
            .with_for_update()
        )
        yield len(result.all())
