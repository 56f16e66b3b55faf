"""FastAPI dependencies for authentication and RBAC."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError

from pmhub.auth.security import decode_token
from pmhub.auth.token_revocation import is_token_revoked
from pmhub.core.permissions import Permission, has_permission
from pmhub.models.user import UserRole
from pmhub.providers import HierarchySvc
from pmhub.schemas.auth import TokenUser

# Token issuance is owned by the identity service; the tokenUrl below is
# used only for Swagger UI's "Authorize" dialog.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(
    request: Request,
    token: Annotated[str, Depends(oauth2_scheme)],
) -> TokenUser:
    """Decode JWT, check deny-list, and return the actor from token claims."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        user_id: str | None = payload.get("sub")
        token_type: str | None = payload.get("type")
        if user_id is None or token_type != "access":
            raise credentials_exception
    except JWTError as exc:
        raise credentials_exception from exc

    # Check Redis-backed deny-list for revoked tokens
    jti: str | None = payload.get("jti")
    if jti:
        redis = getattr(request.app.state, "redis", None)
        if redis and await is_token_revoked(redis, jti):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has been revoked",
                headers={"WWW-Authenticate": "Bearer"},
            )

    try:
        return TokenUser(
            id=user_id,
            role=payload.get("role", ""),
            name=payload.get("name", ""),
            email=payload.get("email", ""),
        )
    except ValidationError as exc:
        # Unknown role claim
        raise credentials_exception from exc


# Convenience type alias
CurrentUser = Annotated[TokenUser, Depends(get_current_user)]


async def get_current_actor(current_user: CurrentUser, service: HierarchySvc) -> TokenUser:
    """Return the token user carrying the role currently stored for them.

    Role gates run on this so a token minted before a demotion or removal
    cannot keep the old rights. A removed actor gets 404 from the service.
    """
    actor = await service.resolve_actor(current_user.id)
    return current_user.model_copy(update={"role": UserRole(actor.role)})


CurrentActor = Annotated[TokenUser, Depends(get_current_actor)]


def require_role(*allowed_roles: str | UserRole):
    """Dependency factory that enforces role-based access.

    Usage:
        @router.get("/super-admin/verify", dependencies=[Depends(require_role("SUPER_ADMIN"))])
    """
    allowed = {UserRole(r) for r in allowed_roles}

    async def _check_role(current_user: CurrentActor) -> TokenUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _check_role


def require_permission(permission: Permission):
    """Dependency factory that enforces a permission of the actor's stored role."""

    async def _check_permission(current_user: CurrentActor) -> TokenUser:
        if not has_permission(current_user.role, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission.value}",
            )
        return current_user

    return _check_permission
