from fastapi import APIRouter, Depends, Query, status

from app.core.auth.deps import get_current_user, require_permission
from app.core.schemas.auth import Principal
from app.core.schemas.rbac import UserCreate, UserUpdate
from app.modules.rbac.user_service import UserService
from app.shared.responses import ok

router = APIRouter(prefix="/users", tags=["Users"])

manage_users = require_permission("user", "manage")


@router.get("", summary="List users")
async def list_users(
    include_inactive: bool = Query(False),
    _: Principal = Depends(get_current_user),
):
    return ok(await UserService.list_users(include_inactive))


@router.get("/{user_id}", summary="Get a user")
async def get_user(user_id: str, _: Principal = Depends(get_current_user)):
    return ok(await UserService.get_user(user_id))


@router.post("", summary="Create a user", status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, _: Principal = Depends(manage_users)):
    return ok(await UserService.create_user(data), "User created")


@router.put("/{user_id}", summary="Update a user")
async def update_user(user_id: str, data: UserUpdate, _: Principal = Depends(manage_users)):
    return ok(await UserService.update_user(user_id, data), "User updated")


@router.post("/{user_id}/deactivate", summary="Deactivate a user")
async def deactivate_user(user_id: str, _: Principal = Depends(manage_users)):
    return ok(await UserService.deactivate_user(user_id), "User deactivated")


@router.delete("/{user_id}", summary="Delete a user")
async def delete_user(user_id: str, _: Principal = Depends(manage_users)):
    await UserService.delete_user(user_id)
    return ok(message="User deleted")
