"""Service layer for the user role hierarchy.

Orchestrates the role policy against persisted users. Every mutating
operation takes the acting user's ID explicitly; nothing here reads an
ambient "current user".

Operations that can take a SUPER_ADMIN out of service (demote, remove)
run their count-check-then-mutate inside ``repo.serialized(SUPER_ADMIN)``
so that two concurrent requests cannot both observe "two left" and leave
the system with none. A target that reads as a SUPER_ADMIN only once its
row is locked sends the operation back through that path.
"""

import logging
from dataclasses import dataclass
from itertools import groupby

from pmhub.core.errors import NotFound
from pmhub.core.role_policy import (
    Decision,
    assignable_roles,
    can_demote,
    can_promote,
    can_remove,
    rank,
    roles_below,
)
from pmhub.models.user import User, UserRole
from pmhub.repositories.protocols import UserRepositoryProtocol
from pmhub.schemas.user import (
    AvailableRolesResponse,
    HierarchyGroup,
    HierarchyQuery,
    HierarchyResponse,
    PromotableUsersResponse,
    RoleChangeResponse,
    SuperAdminVerification,
    UserResponse,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleChange:
    """A single promotion or demotion request."""

    actor_id: str
    target_user_id: str
    new_role: UserRole


class UserHierarchyService:
    """Business logic for promotions, demotions and removals."""

    def __init__(self, repo: UserRepositoryProtocol):
        self._repo = repo

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_hierarchy(self, query: HierarchyQuery | None = None) -> HierarchyResponse:
        """Return users grouped by role, highest rank first."""
        query = query or HierarchyQuery()
        users = await self._repo.list_users(
            role=query.role,
            department=query.department,
            include_inactive=query.include_inactive,
        )
        ordered = sorted(users, key=lambda u: (-rank(u.role), u.name, u.email))
        groups = [
            HierarchyGroup(
                role=UserRole(role),
                rank=rank(role),
                users=[UserResponse.model_validate(u) for u in members],
            )
            for role, members in groupby(ordered, key=lambda u: UserRole(u.role))
        ]
        return HierarchyResponse(groups=groups, total=len(ordered))

    async def get_promotable_users(self, actor_id: str) -> PromotableUsersResponse:
        """Active users ranked strictly below the actor."""
        actor = await self._load_actor(actor_id)
        users = await self._repo.list_with_roles(roles_below(actor.role), exclude_id=actor.id)
        return PromotableUsersResponse(users=[UserResponse.model_validate(u) for u in users])

    async def get_available_roles(self, actor_id: str) -> AvailableRolesResponse:
        actor = await self._load_actor(actor_id)
        return AvailableRolesResponse(roles=assignable_roles(actor.role))

    async def verify_super_admin_count(self) -> SuperAdminVerification:
        count = await self._repo.count_by_role(UserRole.SUPER_ADMIN, active_only=True)
        if count < 1:
            logger.error("No active SUPER_ADMIN users found")
        return SuperAdminVerification(count=count, is_safe=count >= 1, can_remove_one=count >= 2)

    async def resolve_actor(self, actor_id: str) -> User:
        """Return the stored, active acting user.

        Raises:
            NotFound: The actor does not exist or has been removed.
        """
        return await self._load_actor(actor_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def promote_user(
        self, actor_id: str, target_user_id: str, new_role: UserRole
    ) -> RoleChangeResponse:
        """Move a user up the hierarchy.

        Raises:
            NotFound: Actor or target does not exist.
            InsufficientPrivilege: Actor lacks authority over target or role.
            InvalidRoleTransition: *new_role* is not above the current role.
        """
        change = RoleChange(actor_id, target_user_id, UserRole(new_role))
        actor = await self._load_actor(change.actor_id)
        target = await self._load_target(change.target_user_id, for_update=True)

        self._enforce(can_promote(actor.role, target.role, change.new_role), change, "promote")
        user = await self._apply(change)
        return RoleChangeResponse(
            message=f"User promoted to {change.new_role.value}",
            user=UserResponse.model_validate(user),
        )

    async def demote_user(
        self, actor_id: str, target_user_id: str, new_role: UserRole
    ) -> RoleChangeResponse:
        """Move a user down the hierarchy.

        Raises:
            NotFound: Actor or target does not exist.
            LastSuperAdminViolation: Target is the last active SUPER_ADMIN.
            InsufficientPrivilege: Actor lacks authority over target.
            InvalidRoleTransition: *new_role* is not below the current role.
        """
        change = RoleChange(actor_id, target_user_id, UserRole(new_role))
        target = await self._load_target(change.target_user_id)

        user = None
        if UserRole(target.role) is not UserRole.SUPER_ADMIN:
            user = await self._demote(change, None)
        if user is None:
            async with self._repo.serialized(UserRole.SUPER_ADMIN) as super_admins:
                user = await self._demote(change, super_admins)

        return RoleChangeResponse(
            message=f"User demoted to {change.new_role.value}",
            user=UserResponse.model_validate(user),
        )

    async def remove_user(self, actor_id: str, target_user_id: str) -> None:
        """Deactivate a user.

        Raises:
            NotFound: Actor or target does not exist.
            LastSuperAdminViolation: Target is the last active SUPER_ADMIN.
            SelfOperationForbidden: Actor tried to remove themselves.
            InsufficientPrivilege: Actor lacks authority over target.
        """
        target = await self._load_target(target_user_id)

        if UserRole(target.role) is not UserRole.SUPER_ADMIN:
            if await self._remove(actor_id, target_user_id, None):
                return
        async with self._repo.serialized(UserRole.SUPER_ADMIN) as super_admins:
            await self._remove(actor_id, target_user_id, super_admins)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _demote(self, change: RoleChange, super_admins: int | None) -> User | None:
        """Demote under the caller's locks.

        Returns None without writing when *super_admins* is None and the
        locked re-read shows the target became a SUPER_ADMIN; the caller
        retries under ``serialized``.
        """
        actor = await self._load_actor(change.actor_id)
        target = await self._load_target(change.target_user_id, for_update=True)
        if super_admins is None and UserRole(target.role) is UserRole.SUPER_ADMIN:
            return None
        decision = can_demote(
            actor.role, target.role, change.new_role, super_admin_count=super_admins
        )
        self._enforce(decision, change, "demote")
        return await self._apply(change)

    async def _remove(self, actor_id: str, target_user_id: str, super_admins: int | None) -> bool:
        actor = await self._load_actor(actor_id)
        target = await self._load_target(target_user_id, for_update=True)
        if super_admins is None and UserRole(target.role) is UserRole.SUPER_ADMIN:
            return False
        decision = can_remove(
            actor.role,
            target.role,
            is_self=actor.id == target.id,
            super_admin_count=super_admins,
        )
        if not decision.allowed:
            logger.warning(
                "Removal denied: actor=%s target=%s reason=%s",
                actor_id,
                target_user_id,
                decision.reason,
            )
            decision.enforce()

        if not await self._repo.soft_delete(target.id):
            raise NotFound()
        logger.info("User %s (%s) removed by %s", target.id, target.email, actor_id)
        return True

    async def _load_actor(self, actor_id: str) -> User:
        actor = await self._repo.get_active_by_id(actor_id)
        if actor is None:
            raise NotFound("Acting user not found")
        return actor

    async def _load_target(self, user_id: str, *, for_update: bool = False) -> User:
        target = await self._repo.get_active_by_id(user_id, for_update=for_update)
        if target is None:
            raise NotFound(f"User with ID '{user_id}' not found")
        return target

    @staticmethod
    def _enforce(decision: Decision, change: RoleChange, action: str) -> None:
        if not decision.allowed:
            logger.warning(
                "Role %s denied: actor=%s target=%s new_role=%s reason=%s",
                action,
                change.actor_id,
                change.target_user_id,
                change.new_role.value,
                decision.reason,
            )
            decision.enforce()

    async def _apply(self, change: RoleChange) -> User:
        user = await self._repo.update_role(
            change.target_user_id,
            change.new_role,
            promoted_by_id=change.actor_id,
            clear_department=change.new_role is UserRole.MEMBER,
        )
        if user is None:
            raise NotFound(f"User with ID '{change.target_user_id}' not found")
        logger.info(
            "User %s role set to %s by %s",
            change.target_user_id,
            change.new_role.value,
            change.actor_id,
        )
        return user
