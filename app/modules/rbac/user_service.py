import logging
from typing import List

from pymongo.errors import DuplicateKeyError

from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.core.models.rbac import Role, User
from app.core.schemas.rbac import UserCreate, UserUpdate
from app.shared.timezone import get_plant_now

logger = logging.getLogger(__name__)


class UserService:

    @staticmethod
    async def list_users(include_inactive: bool = False) -> List[User]:
        query = User.find_all() if include_inactive else User.find(User.is_active == True)  # noqa: E712
        return await query.sort("name").to_list()

    @staticmethod
    async def get_user(user_id: str) -> User:
        user = await User.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    async def create_user(data: UserCreate) -> User:
        if await User.find_one(User.email == data.email):
            raise DuplicateError(f"A user with email {data.email} already exists")

        if data.roles:
            found = await Role.find({"_id": {"$in": data.roles}}).to_list()
            missing = set(data.roles) - {r.id for r in found}
            if missing:
                raise ValidationError(f"Unknown roles: {', '.join(sorted(missing))}")

        fields = data.model_dump(exclude_none=True)
        user = User(**fields)
        try:
            await user.insert()
        except DuplicateKeyError:
            raise DuplicateError(f"A user with email {data.email} already exists")
        logger.info(f"Created user {user.id} ({user.email})")
        return user

    @staticmethod
    async def update_user(user_id: str, data: UserUpdate) -> User:
        user = await UserService.get_user(user_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        user.touch()
        await user.save()
        return user

    @staticmethod
    async def deactivate_user(user_id: str) -> User:
        user = await UserService.get_user(user_id)
        user.is_active = False
        user.touch()
        await user.save()
        logger.info(f"Deactivated user {user_id}")
        return user

    @staticmethod
    async def delete_user(user_id: str) -> None:
        user = await UserService.get_user(user_id)
        await user.delete()
        logger.info(f"Deleted user {user_id}")

    @staticmethod
    async def record_login(user_id: str) -> None:
        user = await User.get(user_id)
        if user:
            user.last_login = get_plant_now()
            await user.save()
