import logging
from typing import Dict, List

from pymongo.errors import DuplicateKeyError

from app.core.auth import roles as system_roles
from app.core.exceptions import DuplicateError, NotFoundError, PreconditionError, ValidationError
from app.core.models.rbac import Permission, Role, User
from app.core.schemas.rbac import PermissionCreate, RoleCreate, RoleResponse, RoleUpdate

logger = logging.getLogger(__name__)


class RbacService:
    """Roles, permissions and role assignment."""

    # === PERMISSIONS ===

    @staticmethod
    async def list_permissions() -> List[Permission]:
        return await Permission.find_all().sort("resource", "action").to_list()

    @staticmethod
    async def get_permission(permission_id: str) -> Permission:
        permission = await Permission.get(permission_id)
        if not permission:
            raise NotFoundError("Permission not found")
        return permission

    @staticmethod
    async def create_permission(data: PermissionCreate) -> Permission:
        existing = await Permission.find_one(
            {"$or": [{"name": data.name}, {"resource": data.resource, "action": data.action}]}
        )
        if existing:
            raise DuplicateError(f"Permission {data.resource}:{data.action} already exists")

        permission = Permission(**data.model_dump())
        try:
            await permission.insert()
        except DuplicateKeyError:
            raise DuplicateError(f"Permission {data.resource}:{data.action} already exists")
        logger.info(f"Created permission {permission.key}")
        return permission

    # === ROLES ===

    @staticmethod
    async def _permission_map(permission_ids: List[str]) -> Dict[str, Permission]:
        if not permission_ids:
            return {}
        permissions = await Permission.find({"_id": {"$in": list(permission_ids)}}).to_list()
        return {p.id: p for p in permissions}

    @staticmethod
    async def _require_permissions(permission_ids: List[str]) -> None:
        found = await RbacService._permission_map(permission_ids)
        missing = [pid for pid in permission_ids if pid not in found]
        if missing:
            raise ValidationError(f"Unknown permissions: {', '.join(missing)}")

    @staticmethod
    async def expand(role: Role) -> RoleResponse:
        permissions = await RbacService._permission_map(role.permissions)
        return RoleResponse(
            id=role.id,
            name=role.name,
            description=role.description,
            is_system=role.is_system,
            permissions=role.permissions,
            permission_keys=sorted(p.key for p in permissions.values()),
        )

    @staticmethod
    async def list_roles() -> List[RoleResponse]:
        roles = await Role.find_all().sort("name").to_list()
        return [await RbacService.expand(role) for role in roles]

    @staticmethod
    async def get_role(role_id: str) -> Role:
        role = await Role.get(role_id)
        if not role:
            raise NotFoundError("Role not found")
        return role

    @staticmethod
    async def create_role(data: RoleCreate) -> Role:
        if await Role.find_one(Role.name == data.name):
            raise DuplicateError(f"Role '{data.name}' already exists")
        await RbacService._require_permissions(data.permissions)

        role = Role(name=data.name, description=data.description, permissions=data.permissions)
        try:
            await role.insert()
        except DuplicateKeyError:
            raise DuplicateError(f"Role '{data.name}' already exists")
        logger.info(f"Created role {role.name} ({role.id})")
        return role

    @staticmethod
    async def update_role(role_id: str, data: RoleUpdate) -> Role:
        role = await RbacService.get_role(role_id)
        if role.is_system:
            raise PreconditionError("Cannot update system roles")

        if data.name is not None and data.name != role.name:
            if await Role.find_one(Role.name == data.name):
                raise DuplicateError(f"Role '{data.name}' already exists")
            role.name = data.name
        if data.description is not None:
            role.description = data.description
        if data.permissions is not None:
            await RbacService._require_permissions(data.permissions)
            role.permissions = data.permissions

        role.touch()
        await role.save()
        return role

    @staticmethod
    async def delete_role(role_id: str) -> None:
        role = await RbacService.get_role(role_id)
        if role.is_system:
            raise PreconditionError("Cannot delete system roles")
        if await User.find_one({"roles": role.id}):
            raise PreconditionError("Cannot delete a role that is assigned to users")

        await role.delete()
        logger.info(f"Deleted role {role.name} ({role.id})")

    # === USER ROLES ===

    @staticmethod
    async def _get_user(user_id: str) -> User:
        user = await User.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    async def list_user_roles(user_id: str) -> List[Role]:
        user = await RbacService._get_user(user_id)
        if not user.roles:
            return []
        return await Role.find({"_id": {"$in": user.roles}}).to_list()

    @staticmethod
    async def assign_role(user_id: str, role_id: str) -> User:
        user = await RbacService._get_user(user_id)
        role = await RbacService.get_role(role_id)
        if role.id in user.roles:
            raise DuplicateError(f"User already has role '{role.name}'")

        user.roles.append(role.id)
        user.touch()
        await user.save()
        logger.info(f"Assigned role {role.name} to user {user.id}")
        return user

    @staticmethod
    async def remove_role(user_id: str, role_id: str) -> User:
        user = await RbacService._get_user(user_id)
        role = await RbacService.get_role(role_id)
        if role.is_system:
            raise PreconditionError("Cannot remove system roles from users")
        if role.id not in user.roles:
            raise NotFoundError(f"User does not have role '{role.name}'")

        user.roles = [rid for rid in user.roles if rid != role.id]
        user.touch()
        await user.save()
        logger.info(f"Removed role {role.name} from user {user.id}")
        return user

    # === SEEDING ===

    @staticmethod
    async def initialize_system() -> Dict[str, int]:
        """
        Seed system permissions and the admin / plant head / production manager
        roles. Existing records are kept; missing permissions are added to
        existing system roles.
        """
        created_permissions = 0
        permission_ids: Dict[tuple, str] = {}

        for (resource, action) in system_roles.SYSTEM_PERMISSIONS:
            permission = await Permission.find_one(Permission.resource == resource, Permission.action == action)
            if permission is None:
                permission = Permission(
                    name=f"{resource}:{action}",
                    description=f"{action.capitalize()} {resource}",
                    resource=resource,
                    action=action,
                )
                await permission.insert()
                created_permissions += 1
            permission_ids[(resource, action)] = permission.id

        created_roles = 0
        for name, description in system_roles.SYSTEM_ROLES.items():
            granted = [
                permission_ids[key]
                for key, holders in system_roles.SYSTEM_PERMISSIONS.items()
                if name in holders
            ]
            role = await Role.find_one(Role.name == name)
            if role is None:
                role = Role(name=name, description=description, permissions=granted, is_system=True)
                await role.insert()
                created_roles += 1
                continue

            missing = [pid for pid in granted if pid not in role.permissions]
            if missing or not role.is_system:
                role.permissions.extend(missing)
                role.is_system = True
                role.touch()
                await role.save()

        logger.info(f"RBAC initialised: {created_permissions} permissions, {created_roles} roles created")
        return {"permissions_created": created_permissions, "roles_created": created_roles}
