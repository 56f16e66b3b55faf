"""Role hierarchy policy.

Pure decision functions over roles. Nothing here touches the database:
callers pass in roles (and, for the last-super-admin guard, the current
number of active SUPER_ADMIN users) and receive an ``Allowed`` or
``Denied`` decision.

Hierarchy (highest first)::

    SUPER_ADMIN (100) > ADMIN (60) > MANAGER (40) > MEMBER (20)

An actor has authority over a target when it strictly outranks it.
SUPER_ADMIN is the apex and also has authority over other SUPER_ADMINs;
same-rank operations are denied for every other role.

Usage::

    decision = can_promote(actor.role, target.role, UserRole.ADMIN)
    decision.enforce()   # raises the denial error, no-op when allowed
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pmhub.core.errors import (
    HierarchyError,
    InsufficientPrivilege,
    InvalidRoleTransition,
    LastSuperAdminViolation,
    SelfOperationForbidden,
)
from pmhub.models.user import UserRole

ROLE_RANKS: dict[UserRole, int] = {
    UserRole.SUPER_ADMIN: 100,
    UserRole.ADMIN: 60,
    UserRole.MANAGER: 40,
    UserRole.MEMBER: 20,
}

# Highest rank first
ROLE_ORDER: tuple[UserRole, ...] = tuple(
    sorted(ROLE_RANKS, key=lambda r: ROLE_RANKS[r], reverse=True)
)


@dataclass(frozen=True)
class Allowed:
    """The operation may proceed."""

    allowed: Literal[True] = True

    def enforce(self) -> None:
        return None


@dataclass(frozen=True)
class Denied:
    """The operation is refused; ``error`` is what the service raises."""

    error: HierarchyError
    allowed: Literal[False] = False

    @property
    def reason(self) -> str:
        return self.error.message

    def enforce(self) -> None:
        raise self.error


Decision = Allowed | Denied

ALLOWED = Allowed()


def rank(role: str | UserRole) -> int:
    """Return the rank of *role*. Raises ``ValueError`` for unknown roles."""
    return ROLE_RANKS[UserRole(role)]


def outranks(actor: str | UserRole, target: str | UserRole) -> bool:
    """Whether *actor* holds authority over a user with role *target*."""
    if UserRole(actor) is UserRole.SUPER_ADMIN:
        return True
    return rank(actor) > rank(target)


def assignable_roles(actor: str | UserRole) -> list[UserRole]:
    """Roles *actor* may hand out, highest first.

    SUPER_ADMIN may assign every role, everyone else only roles strictly
    below their own.
    """
    if UserRole(actor) is UserRole.SUPER_ADMIN:
        return list(ROLE_ORDER)
    actor_rank = rank(actor)
    return [r for r in ROLE_ORDER if ROLE_RANKS[r] < actor_rank]


def roles_below(role: str | UserRole) -> list[UserRole]:
    """Roles strictly below *role*, highest first."""
    role_rank = rank(role)
    return [r for r in ROLE_ORDER if ROLE_RANKS[r] < role_rank]


def would_leave_no_super_admin(target_role: str | UserRole, super_admin_count: int) -> bool:
    """True if taking *target_role* out of SUPER_ADMIN leaves none active."""
    return UserRole(target_role) is UserRole.SUPER_ADMIN and super_admin_count <= 1


def _no_authority(actor: str | UserRole, target: str | UserRole, verb: str = "modify") -> Denied:
    return Denied(
        InsufficientPrivilege(f"{UserRole(actor).value} cannot {verb} a {UserRole(target).value}")
    )


def _last_super_admin(target: str | UserRole, super_admin_count: int | None) -> Denied | None:
    if super_admin_count is not None and would_leave_no_super_admin(target, super_admin_count):
        return Denied(
            LastSuperAdminViolation(
                "Cannot remove the last active SUPER_ADMIN from the system"
            )
        )
    return None


def can_promote(
    actor: str | UserRole,
    target: str | UserRole,
    new_role: str | UserRole,
) -> Decision:
    """Decide whether *actor* may move a *target* user up to *new_role*."""
    if not outranks(actor, target):
        return _no_authority(actor, target)
    if UserRole(new_role) not in assignable_roles(actor):
        return Denied(
            InsufficientPrivilege(
                f"{UserRole(actor).value} cannot assign the {UserRole(new_role).value} role"
            )
        )
    if rank(new_role) <= rank(target):
        return Denied(
            InvalidRoleTransition("Promotion target role must be higher than the current role")
        )
    return ALLOWED


def can_demote(
    actor: str | UserRole,
    target: str | UserRole,
    new_role: str | UserRole | None = None,
    super_admin_count: int | None = None,
) -> Decision:
    """Decide whether *actor* may move a *target* user down.

    When *super_admin_count* is supplied and the target is a SUPER_ADMIN,
    the last-super-admin guard runs before any rank check.
    """
    guard = _last_super_admin(target, super_admin_count)
    if guard is not None:
        return guard
    if not outranks(actor, target):
        return _no_authority(actor, target)
    if new_role is not None and rank(new_role) >= rank(target):
        return Denied(InvalidRoleTransition("Target role must be lower than current role"))
    return ALLOWED


def can_remove(
    actor: str | UserRole,
    target: str | UserRole,
    *,
    is_self: bool = False,
    super_admin_count: int | None = None,
) -> Decision:
    """Decide whether *actor* may remove a *target* user from the system."""
    guard = _last_super_admin(target, super_admin_count)
    if guard is not None:
        return guard
    if is_self:
        return Denied(SelfOperationForbidden("You cannot remove your own account"))
    if not outranks(actor, target):
        return _no_authority(actor, target, "remove")
    return ALLOWED
