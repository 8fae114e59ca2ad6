"""User management: listing, profile updates, deactivation, permissions."""

import logging
from typing import Dict, List, Optional

from buildsmart.core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from buildsmart.core.roles import Permission, Role, default_permissions
from buildsmart.repositories.base import Store
from buildsmart.schemas.schemas import (
    PRIVILEGED_USER_FIELDS,
    CurrentUser,
    UserRecord,
    UserUpdateRequest,
)

logger = logging.getLogger("buildsmart.users")


class UserService:
    """Admin and self-service operations on user records."""

    @staticmethod
    def _get(store: Store, user_id: str) -> UserRecord:
        user = store.users.get_by_id(user_id)
        if not user:
            raise ResourceNotFoundError("User not found")
        return user

    @staticmethod
    def list_users(
        store: Store,
        role: Optional[Role] = None,
        site: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[UserRecord]:
        return store.users.list(role=role, site=site, is_active=is_active, search=search)

    @staticmethod
    def get_user(store: Store, caller: CurrentUser, user_id: str) -> UserRecord:
        """Users may view themselves; Admin may view anyone."""
        if caller.id != user_id and not caller.is_admin:
            raise ForbiddenError("Unauthorized to view this user")
        return UserService._get(store, user_id)

    @staticmethod
    def update_user(
        store: Store,
        caller: CurrentUser,
        user_id: str,
        body: UserUpdateRequest,
    ) -> UserRecord:
        """Apply a profile patch.

        Non-admin callers may only edit themselves, and role, permissions and
        isActive are dropped from their patch without error. A role change
        without explicit permissions resets permissions to the role default.
        """
        if caller.id != user_id and not caller.is_admin:
            raise ForbiddenError("Unauthorized to update this user")

        updates = body.model_dump(exclude_unset=True)
        if not caller.is_admin:
            stripped = [f for f in PRIVILEGED_USER_FIELDS if f in updates]
            for field in stripped:
                updates.pop(field)
            if stripped:
                logger.info("Stripped %s from update by non-admin %s", stripped, caller.id)

        user = UserService._get(store, user_id)
        for field, value in updates.items():
            setattr(user, field, value)
        if "role" in updates and "permissions" not in updates:
            user.permissions = default_permissions(user.role)
        return store.users.save(user)

    @staticmethod
    def deactivate_user(store: Store, caller: CurrentUser, user_id: str) -> UserRecord:
        """Soft-delete: flip is_active off, keep the record."""
        if caller.id == user_id:
            raise ValidationError("Cannot deactivate your own account")
        user = UserService._get(store, user_id)
        user.is_active = False
        logger.info("User %s deactivated by %s", user_id, caller.id)
        return store.users.save(user)

    @staticmethod
    def update_permissions(store: Store, user_id: str, permissions: List[Permission]) -> UserRecord:
        user = UserService._get(store, user_id)
        # Keep first occurrence order, drop duplicates
        user.permissions = list(dict.fromkeys(permissions))
        return store.users.save(user)

    @staticmethod
    def stats(store: Store) -> Dict[str, object]:
        total = len(store.users.list())
        active = len(store.users.list(is_active=True))
        return {
            "total": total,
            "active": active,
            "inactive": total - active,
            "by_role": store.users.count_by_role(),
        }


user_service = UserService()
