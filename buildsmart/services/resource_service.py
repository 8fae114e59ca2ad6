"""Site resource CRUD (tasks, materials, workforce, safety alerts)."""

import logging
from typing import Any, Dict, List

from buildsmart.core.exceptions import ResourceNotFoundError, ValidationError
from buildsmart.repositories.base import Store
from buildsmart.schemas.schemas import CurrentUser, ResourceItem

logger = logging.getLogger("buildsmart.resources")


class ResourceService:
    """Thin CRUD over the store; authorization happens at the router."""

    @staticmethod
    def list(store: Store, resource_type: str) -> List[ResourceItem]:
        return store.resources(resource_type).list()

    @staticmethod
    def get(store: Store, resource_type: str, item_id: str) -> ResourceItem:
        item = store.resources(resource_type).get(item_id)
        if not item:
            raise ResourceNotFoundError(f"Item {item_id} not found in {resource_type}")
        return item

    @staticmethod
    def create(store: Store, resource_type: str, data: Dict[str, Any], actor: CurrentUser) -> ResourceItem:
        if not data:
            raise ValidationError("Request body must be a non-empty object")
        item = store.resources(resource_type).create({**data, "createdBy": actor.id})
        logger.info("%s created %s/%s", actor.id, resource_type, item.id)
        return item

    @staticmethod
    def update(
        store: Store,
        resource_type: str,
        item_id: str,
        changes: Dict[str, Any],
        actor: CurrentUser,
    ) -> ResourceItem:
        changes = {k: v for k, v in changes.items() if k not in ("id", "createdBy")}
        item = store.resources(resource_type).update(item_id, {**changes, "updatedBy": actor.id})
        if not item:
            raise ResourceNotFoundError(f"Item {item_id} not found in {resource_type}")
        return item

    @staticmethod
    def delete(store: Store, resource_type: str, item_id: str, actor: CurrentUser) -> ResourceItem:
        item = store.resources(resource_type).delete(item_id)
        if not item:
            raise ResourceNotFoundError(f"Item {item_id} not found in {resource_type}")
        logger.info("%s deleted %s/%s", actor.id, resource_type, item_id)
        return item


resource_service = ResourceService()
