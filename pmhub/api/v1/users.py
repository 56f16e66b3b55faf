"""User hierarchy API endpoints.

Handlers only extract parameters and delegate to ``UserHierarchyService``.
Domain errors raised by the service are mapped to status codes by the
application's exception handlers:

- ``InsufficientPrivilege`` / ``SelfOperationForbidden``: 403
- ``NotFound``: 404
- ``LastSuperAdminViolation``: 409
- ``InvalidRoleTransition`` and request validation failures: 400
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from pmhub.auth.dependencies import CurrentUser, require_permission, require_role
from pmhub.core.permissions import Permission
from pmhub.models.user import UserRole
from pmhub.providers import HierarchySvc
from pmhub.schemas.user import (
    AvailableRolesResponse,
    HierarchyQuery,
    HierarchyResponse,
    PromotableUsersResponse,
    RoleChangeRequest,
    RoleChangeResponse,
    SuperAdminVerification,
)
from pmhub.utils.audit import audit_logged
from pmhub.validation import validate_body, validate_query

router = APIRouter()


@router.get(
    "/hierarchy",
    response_model=HierarchyResponse,
    dependencies=[Depends(require_permission(Permission.VIEW_USERS))],
)
async def get_hierarchy(
    service: HierarchySvc,
    query: HierarchyQuery = Depends(validate_query(HierarchyQuery)),
) -> HierarchyResponse:
    """
    List users grouped by role, highest rank first.

    - **role**: Only include users holding this role
    - **department**: Only include users in this department
    - **include_inactive**: Include removed (deactivated) users
    """
    return await service.get_hierarchy(query)


@router.get("/promotable", response_model=PromotableUsersResponse)
async def get_promotable_users(
    current_user: CurrentUser,
    service: HierarchySvc,
) -> PromotableUsersResponse:
    """List users ranked below the current user."""
    return await service.get_promotable_users(current_user.id)


@router.get("/available-roles", response_model=AvailableRolesResponse)
async def get_available_roles(
    current_user: CurrentUser,
    service: HierarchySvc,
) -> AvailableRolesResponse:
    """List roles the current user may assign to others."""
    return await service.get_available_roles(current_user.id)


@router.get(
    "/super-admin/verify",
    response_model=SuperAdminVerification,
    dependencies=[Depends(require_role(UserRole.SUPER_ADMIN))],
)
async def verify_super_admin_count(service: HierarchySvc) -> SuperAdminVerification:
    """Report the number of active SUPER_ADMIN users (SUPER_ADMIN only)."""
    return await service.verify_super_admin_count()


@router.post(
    "/{user_id}/promote",
    response_model=RoleChangeResponse,
    dependencies=[
        Depends(require_permission(Permission.MANAGE_USERS)),
        Depends(audit_logged("promote_user")),
    ],
)
async def promote_user(
    user_id: UUID,
    current_user: CurrentUser,
    service: HierarchySvc,
    body: RoleChangeRequest = Depends(validate_body(RoleChangeRequest)),
) -> RoleChangeResponse:
    """Promote a user to a higher role."""
    return await service.promote_user(current_user.id, str(user_id), body.new_role)


@router.post(
    "/{user_id}/demote",
    response_model=RoleChangeResponse,
    dependencies=[
        Depends(require_permission(Permission.MANAGE_USERS)),
        Depends(audit_logged("demote_user")),
    ],
)
async def demote_user(
    user_id: UUID,
    current_user: CurrentUser,
    service: HierarchySvc,
    body: RoleChangeRequest = Depends(validate_body(RoleChangeRequest)),
) -> RoleChangeResponse:
    """Demote a user to a lower role. The last SUPER_ADMIN cannot be demoted."""
    return await service.demote_user(current_user.id, str(user_id), body.new_role)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[
        Depends(require_permission(Permission.MANAGE_USERS)),
        Depends(audit_logged("remove_user")),
    ],
)
async def remove_user(
    user_id: UUID,
    current_user: CurrentUser,
    service: HierarchySvc,
) -> None:
    """Remove (deactivate) a user. The last SUPER_ADMIN cannot be removed."""
    await service.remove_user(current_user.id, str(user_id))
