import logging
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt

from app.core.exceptions import AuthError
from app.core.models.rbac import Permission, Role, User
from app.core.monitoring.prometheus_middleware import track_auth_attempt
from app.core.schemas.auth import Principal
from app.core.setting import config
from app.shared.timezone import get_plant_now

logger = logging.getLogger(__name__)


class AuthService:
    """
    Bearer-token verification against the configured identity provider.

    Tokens carry the internal user id in `sub`; audience and issuer are checked
    when configured.
    """

    @staticmethod
    def create_access_token(user_id: str, expires_minutes: Optional[int] = None, **claims) -> str:
        """Issue a signed token for `user_id` (used by tooling and non-production logins)."""
        expire = get_plant_now() + timedelta(minutes=expires_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode = {"sub": user_id, "exp": expire, **claims}
        if config.token_audience:
            to_encode["aud"] = config.token_audience
        if config.token_issuer:
            to_encode["iss"] = config.token_issuer
        return jwt.encode(to_encode, config.signing_key, algorithm=config.ALGORITHM)

    @staticmethod
    def verify_token(token: str) -> dict:
        """
        Decode and verify a bearer token.

        Raises:
            AuthError: invalid signature, expired, wrong audience/issuer or no subject
        """
        try:
            payload = jwt.decode(
                token,
                config.verification_key,
                algorithms=[config.ALGORITHM],
                audience=config.token_audience,
                issuer=config.token_issuer,
                options={"verify_aud": config.token_audience is not None},
            )
        except JWTError as e:
            logger.warning(f"Token verification failed: {e}")
            track_auth_attempt(False)
            raise AuthError("Invalid token")

        if not payload.get("sub"):
            track_auth_attempt(False)
            raise AuthError("Invalid token")
        return payload

    @staticmethod
    async def build_principal(user_id: str) -> Principal:
        """
        Resolve an internal user to its roles and permission keys.

        Raises:
            AuthError: user unknown or inactive
        """
        user = await User.get(user_id)
        if user is None or not user.is_active:
            track_auth_attempt(False)
            raise AuthError("User not found or inactive")

        roles = await Role.find({"_id": {"$in": user.roles}}).to_list() if user.roles else []
        permission_ids = {pid for role in roles for pid in role.permissions}
        permissions = (
            await Permission.find({"_id": {"$in": list(permission_ids)}}).to_list()
            if permission_ids else []
        )

        track_auth_attempt(True)
        return Principal(
            user_id=user.id,
            email=user.email,
            name=user.name,
            role_ids=[role.id for role in roles],
            role_names=[role.name for role in roles],
            permissions=sorted(p.key for p in permissions),
        )

    @staticmethod
    async def authenticate(token: str) -> Principal:
        payload = AuthService.verify_token(token)
        return await AuthService.build_principal(payload["sub"])
