"""Audit logging for privileged hierarchy actions."""

from fastapi import Request

from pmhub.auth.dependencies import CurrentUser
from pmhub.utils.logging import get_logger

logger = get_logger("audit")


def audit_logged(action: str):
    """Dependency factory that logs privileged actions.

    Usage::

        @router.post("/{user_id}/promote", dependencies=[Depends(audit_logged("promote_user"))])
    """

    async def _log(request: Request, current_user: CurrentUser) -> None:
        client_ip = request.client.host if request.client else "unknown"
        request_id = getattr(request.state, "request_id", "n/a")
        logger.info(
            "audit",
            action=action,
            actor_id=current_user.id,
            actor_role=current_user.role.value,
            target_user_id=request.path_params.get("user_id"),
            ip=client_ip,
            request_id=request_id,
            path=request.url.path,
        )

    return _log
