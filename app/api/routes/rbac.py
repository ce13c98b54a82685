from fastapi import APIRouter, Depends, status

from app.core.auth import roles
from app.core.auth.deps import require_roles
from app.core.schemas.auth import Principal
from app.core.schemas.rbac import PermissionCreate, RoleAssignment, RoleCreate, RoleUpdate
from app.modules.rbac.rbac_service import RbacService
from app.shared.responses import ok

router = APIRouter(prefix="/rbac", tags=["RBAC"])

admin_only = require_roles(roles.ADMIN)

# =============================================================================
# ROLES
# =============================================================================

@router.get("/roles", summary="List roles with their permissions")
async def list_roles(_: Principal = Depends(admin_only)):
    return ok(await RbacService.list_roles())


@router.get("/roles/{role_id}", summary="Get a role")
async def get_role(role_id: str, _: Principal = Depends(admin_only)):
    role = await RbacService.get_role(role_id)
    return ok(await RbacService.expand(role))


@router.post("/roles", summary="Create a role", status_code=status.HTTP_201_CREATED)
async def create_role(data: RoleCreate, _: Principal = Depends(admin_only)):
    return ok(await RbacService.create_role(data), "Role created")


@router.put("/roles/{role_id}", summary="Update a role")
async def update_role(role_id: str, data: RoleUpdate, _: Principal = Depends(admin_only)):
    return ok(await RbacService.update_role(role_id, data), "Role updated")


@router.delete("/roles/{role_id}", summary="Delete a role")
async def delete_role(role_id: str, _: Principal = Depends(admin_only)):
    await RbacService.delete_role(role_id)
    return ok(message="Role deleted")

# =============================================================================
# PERMISSIONS
# =============================================================================

@router.get("/permissions", summary="List permissions")
async def list_permissions(_: Principal = Depends(admin_only)):
    return ok(await RbacService.list_permissions())


@router.get("/permissions/{permission_id}", summary="Get a permission")
async def get_permission(permission_id: str, _: Principal = Depends(admin_only)):
    return ok(await RbacService.get_permission(permission_id))


@router.post("/permissions", summary="Create a permission", status_code=status.HTTP_201_CREATED)
async def create_permission(data: PermissionCreate, _: Principal = Depends(admin_only)):
    return ok(await RbacService.create_permission(data), "Permission created")

# =============================================================================
# USER ROLES
# =============================================================================

@router.get("/users/{user_id}/roles", summary="List a user's roles")
async def list_user_roles(user_id: str, _: Principal = Depends(admin_only)):
    return ok(await RbacService.list_user_roles(user_id))


@router.post("/users/{user_id}/roles", summary="Assign a role to a user")
async def assign_user_role(user_id: str, data: RoleAssignment, _: Principal = Depends(admin_only)):
    return ok(await RbacService.assign_role(user_id, data.role_id), "Role assigned")


@router.delete("/users/{user_id}/roles/{role_id}", summary="Remove a role from a user")
async def remove_user_role(user_id: str, role_id: str, _: Principal = Depends(admin_only)):
    return ok(await RbacService.remove_role(user_id, role_id), "Role removed")

# =============================================================================
# INITIALISATION
# =============================================================================

@router.post("/init", summary="Seed system roles and permissions")
async def initialize_rbac(_: Principal = Depends(admin_only)):
    """Idempotent: existing roles and permissions are kept."""
    return ok(await RbacService.initialize_system(), "RBAC initialised")
