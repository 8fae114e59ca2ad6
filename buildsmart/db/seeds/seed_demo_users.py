"""Provision the four canonical demo users (one per role)."""

import logging
import uuid
from typing import Optional

from buildsmart.core.config import settings
from buildsmart.core.roles import default_permissions
from buildsmart.core.security import hash_password
from buildsmart.repositories.base import Store
from buildsmart.schemas.schemas import UserRecord
from buildsmart.services.auth_service import DEMO_USERS

logger = logging.getLogger("buildsmart.seed")


def seed_demo_users(store: Store, password: Optional[str] = None) -> int:
    """Create any missing demo users. Returns how many were created."""
    password = password or settings.DEMO_PASSWORD
    created = 0
    for index, (role, demo) in enumerate(DEMO_USERS.items(), start=1):
        if store.users.get_by_email(demo["email"]):
            continue
        store.users.add(UserRecord(
            id=str(uuid.uuid4()),
            name=demo["name"],
            email=demo["email"],
            hashed_password=hash_password(password),
            role=role,
            site=settings.DEFAULT_SITE,
            permissions=default_permissions(role),
            employee_id=f"EMP-DEMO-{index:03d}",
        ))
        created += 1
    if created:
        logger.info("✅ Seeded %d demo users", created)
    else:
        logger.info("ℹ️  Demo users already present, skipping")
    return created
