"""Gated CRUD routers for site resources."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from buildsmart.core.security import RequireAction, get_current_user
from buildsmart.repositories import Store, get_store
from buildsmart.schemas.schemas import CurrentUser, ResourceListResponse, ResourceResponse
from buildsmart.services.resource_service import resource_service

# resource type → (create action, edit action, delete action)
RESOURCE_ACTIONS = {
    "tasks": ("create_task", "edit_task", "delete_task"),
    "materials": ("edit_material", "edit_material", "edit_material"),
    "workforce": ("edit_workforce", "edit_workforce", "edit_workforce"),
    "safety": ("report_safety", "approve", "approve"),
}


def build_resource_router(resource_type: str) -> APIRouter:
    """CRUD router for one resource type. Reads need any login; writes are action-gated."""
    create_action, edit_action, delete_action = RESOURCE_ACTIONS[resource_type]
    router = APIRouter(prefix=f"/{resource_type}", tags=[resource_type])

    @router.get("", response_model=ResourceListResponse)
    async def list_items(
        store: Store = Depends(get_store),
        current_user: CurrentUser = Depends(get_current_user),
    ):
        items = resource_service.list(store, resource_type)
        return ResourceListResponse(count=len(items), items=items)

    @router.get("/{item_id}", response_model=ResourceResponse, response_model_exclude_none=True)
    async def get_item(
        item_id: str,
        store: Store = Depends(get_store),
        current_user: CurrentUser = Depends(get_current_user),
    ):
        return ResourceResponse(item=resource_service.get(store, resource_type, item_id))

    @router.post("", response_model=ResourceResponse, status_code=201, response_model_exclude_none=True)
    async def create_item(
        body: Dict[str, Any] = Body(...),
        store: Store = Depends(get_store),
        current_user: CurrentUser = Depends(RequireAction(create_action, resource_type)),
    ):
        return ResourceResponse(item=resource_service.create(store, resource_type, body, current_user))

    @router.put("/{item_id}", response_model=ResourceResponse, response_model_exclude_none=True)
    async def update_item(
        item_id: str,
        body: Dict[str, Any] = Body(...),
        store: Store = Depends(get_store),
        current_user: CurrentUser = Depends(RequireAction(edit_action, resource_type)),
    ):
        item = resource_service.update(store, resource_type, item_id, body, current_user)
        return ResourceResponse(item=item)

    @router.delete("/{item_id}", response_model=ResourceResponse, response_model_exclude_none=True)
    async def delete_item(
        item_id: str,
        store: Store = Depends(get_store),
        current_user: CurrentUser = Depends(RequireAction(delete_action, resource_type)),
    ):
        item = resource_service.delete(store, resource_type, item_id, current_user)
        return ResourceResponse(item=item, message="Deleted successfully")

    return router


routers = [build_resource_router(resource_type) for resource_type in RESOURCE_ACTIONS]
