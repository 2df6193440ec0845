"""
Authentication router — session teardown.

Endpoints:
    POST /auth/logout   → revoke the caller's auth token

Identity proofing (OTP) happens upstream; tokens are issued through
``hackops.services.principal.issue_token``.
"""

from fastapi import APIRouter, Depends

from hackops.dependencies import get_principal_resolver
from hackops.schemas.base import AuthenticatedRequest, MessageOut
from hackops.services.principal import PrincipalResolver

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/logout", response_model=MessageOut)
async def logout(
    payload: AuthenticatedRequest,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
):
    """Revoke the presented token; later calls with it are Unauthenticated."""
    await resolver.revoke(payload.email, payload.auth_token)
    return MessageOut(message="Logged out successfully.")
