from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from app.core.auth.authentication import AuthService
from app.core.exceptions import ForbiddenError
from app.core.schemas.auth import Principal
from app.core.setting import config

# This tells FastAPI where to get the token (Authorization header)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{config.API_V1_STR}/auth/token")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> Principal:
    """
    Dependency that verifies the bearer token and loads the user's roles and permissions.
    """
    return await AuthService.authenticate(token)


def require_roles(*allowed_roles: str):
    """
    Dependency factory that checks the current user holds one of the allowed roles.
    """
    async def role_checker(
        current_user: Principal = Depends(get_current_user),
    ) -> Principal:
        if not current_user.has_role(*allowed_roles):
            roles_str = ", ".join(allowed_roles)
            raise ForbiddenError(f"Insufficient role permissions. Required: {roles_str}")
        return current_user

    return role_checker


def require_permission(resource: str, action: str):
    """
    Dependency factory that checks the current user holds `resource:action`.
    """
    async def permission_checker(
        current_user: Principal = Depends(get_current_user),
    ) -> Principal:
        if not current_user.has_permission(resource, action):
            raise ForbiddenError(f"Insufficient permissions: {resource}:{action}")
        return current_user

    return permission_checker
