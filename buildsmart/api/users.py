"""Users API router: listing, profile edits, deactivation, permissions."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from buildsmart.core.roles import Role
from buildsmart.core.security import get_current_user, require_admin, require_manager
from buildsmart.repositories import Store, get_store
from buildsmart.schemas.schemas import (
    CurrentUser,
    PermissionsUpdateRequest,
    UserListResponse,
    UserResponse,
    UserStats,
    UserStatsResponse,
    UserUpdateRequest,
    to_user_out,
)
from buildsmart.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[Role] = Query(None),
    site: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None),
    store: Store = Depends(get_store),
    caller: CurrentUser = Depends(require_manager),
):
    """List users (Admin and Project Manager only)."""
    users = user_service.list_users(store, role=role, site=site, is_active=is_active, search=search)
    return UserListResponse(count=len(users), users=[to_user_out(u) for u in users])


@router.get("/stats/summary", response_model=UserStatsResponse)
async def user_stats(
    store: Store = Depends(get_store),
    caller: CurrentUser = Depends(require_manager),
):
    """User counts by status and role (Admin and Project Manager only)."""
    return UserStatsResponse(stats=UserStats(**user_service.stats(store)))


@router.get("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def get_user(
    user_id: str,
    store: Store = Depends(get_store),
    caller: CurrentUser = Depends(get_current_user),
):
    """Get a user; callers may view themselves, Admin may view anyone."""
    return UserResponse(user=to_user_out(user_service.get_user(store, caller, user_id)))


@router.put("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    store: Store = Depends(get_store),
    caller: CurrentUser = Depends(get_current_user),
):
    """Update a profile. Role, permissions and isActive are Admin-only fields."""
    user = user_service.update_user(store, caller, user_id, body)
    return UserResponse(user=to_user_out(user))


@router.delete("/{user_id}", response_model=UserResponse, response_model_exclude_none=True)
async def deactivate_user(
    user_id: str,
    store: Store = Depends(get_store),
    caller: CurrentUser = Depends(require_admin),
):
    """Deactivate a user (Admin only). The record is kept."""
    user = user_service.deactivate_user(store, caller, user_id)
    return UserResponse(user=to_user_out(user), message="User deactivated successfully")


@router.put("/{user_id}/permissions", response_model=UserResponse, response_model_exclude_none=True)
async def update_permissions(
    user_id: str,
    body: PermissionsUpdateRequest,
    store: Store = Depends(get_store),
    caller: CurrentUser = Depends(require_admin),
):
    """Replace a user's permission list (Admin only)."""
    user = user_service.update_permissions(store, user_id, body.permissions)
    return UserResponse(user=to_user_out(user), message="Permissions updated successfully")
