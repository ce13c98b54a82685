from fastapi import APIRouter, Depends

from app.core.auth.authentication import AuthService
from app.core.auth.deps import get_current_user
from app.core.exceptions import ForbiddenError
from app.core.schemas.auth import DevTokenRequest, Principal, TokenResponse
from app.core.setting import config
from app.modules.rbac.user_service import UserService
from app.shared.responses import ok

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", summary="Current user with roles and permissions")
async def read_me(current_user: Principal = Depends(get_current_user)):
    return ok(current_user)


@router.post("/login", summary="Record a login for the current user")
async def login(current_user: Principal = Depends(get_current_user)):
    """The identity provider has already authenticated the caller; this stamps last_login."""
    await UserService.record_login(current_user.user_id)
    return ok(current_user, "Login recorded")


@router.post("/token", summary="Issue a token for a user (non-production only)", response_model=TokenResponse)
async def issue_dev_token(data: DevTokenRequest):
    if config.is_production:
        raise ForbiddenError("Token issuing is disabled in production")

    await UserService.get_user(data.user_id)
    token = AuthService.create_access_token(data.user_id, data.expires_minutes)
    return TokenResponse(access_token=token)
