"""Authentication API endpoints.

Token issuance is handled by the identity service. This service validates
tokens statelessly via the shared JWT secret; only the /me endpoint lives
here, for token introspection.
"""

from fastapi import APIRouter, Request

from pmhub.auth.dependencies import CurrentUser
from pmhub.core.permissions import permissions_for
from pmhub.rate_limit import limiter
from pmhub.schemas.auth import CurrentUserResponse

router = APIRouter()


@router.get("/me", response_model=CurrentUserResponse)
@limiter.limit("30/minute")
async def get_current_user_info(
    request: Request, current_user: CurrentUser
) -> CurrentUserResponse:
    """Return the authenticated user's claims and the permissions of their role."""
    return CurrentUserResponse(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        role=current_user.role,
        permissions=sorted(permissions_for(current_user.role)),
    )
