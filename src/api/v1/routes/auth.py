"""Session API routes."""

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from api.dependencies.auth import AccessToken, CurrentUser, get_auth_provider
from api.v1.dependencies import get_profile_service, get_profile_view_service
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.profile_service import ProfileService
from domain.services.profile_view_service import ProfileViewService
from infrastructure.auth.provider import IAuthProvider

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])

LOGIN_PATH = "/login"


class LogoutResponse(BaseModel):
    """Where the page goes after signing out."""

    redirect_to: str
    session_revoked: bool


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Sign out",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def logout(
    request: Request,
    user: CurrentUser,
    token: AccessToken,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
    service: ProfileService = Depends(get_profile_service),
    view_service: ProfileViewService = Depends(get_profile_view_service),
) -> LogoutResponse:
    """
    Revoke the session at the auth backend and drop the user's cached page
    data. Local state is cleared even if the backend revoke fails.
    """
    revoked = await auth_provider.sign_out(token)
    if not revoked:
        logger.warning("logout_revoke_failed", user_id=str(user.id))

    service.forget(user.id)
    view_service.reset(user.id)
    logger.info("user_signed_out", user_id=str(user.id))

    return LogoutResponse(redirect_to=LOGIN_PATH, session_revoked=revoked)
