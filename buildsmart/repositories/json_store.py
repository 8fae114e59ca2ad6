"""Flat JSON-file repositories: one array-of-objects file per collection."""

import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from buildsmart.core.exceptions import ResourceConflictError
from buildsmart.core.roles import Role
from buildsmart.repositories.base import RESOURCE_TYPES, ResourceRepository, Store, UserRepository
from buildsmart.schemas.schemas import ResourceItem, UserRecord

logger = logging.getLogger("buildsmart.storage")

_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _locks_guard:
        return _locks.setdefault(str(path.resolve()), threading.RLock())


class JsonCollection:
    """A JSON file holding a list of objects, rewritten atomically on change."""

    def __init__(self, path: Path):
        self.path = path
        self.lock = _lock_for(path)

    def read(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.error("Corrupt data file %s, treating as empty", self.path)
            return []
        return data if isinstance(data, list) else []

    def write(self, rows: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, default=str)
        os.replace(tmp, self.path)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _same_employee_id(row: Dict[str, Any], user: UserRecord) -> bool:
    return user.employee_id is not None and row.get("employee_id") == user.employee_id


class JsonUserRepository(UserRepository):
    def __init__(self, collection: JsonCollection):
        self.collection = collection

    def _all(self) -> List[UserRecord]:
        return [UserRecord.model_validate(row) for row in self.collection.read()]

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        return next((u for u in self._all() if u.id == user_id), None)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        return next((u for u in self._all() if u.email == email), None)

    def list(
        self,
        role: Optional[Role] = None,
        site: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[UserRecord]:
        users = [u for u in self._all() if self.matches(u, role, site, is_active, search)]
        # Stable reverse of insertion order keeps "newest first" without timestamp ties
        return list(reversed(users))

    def add(self, user: UserRecord) -> UserRecord:
        with self.collection.lock:
            rows = self.collection.read()
            if any(
                row.get("email") == user.email or _same_employee_id(row, user)
                for row in rows
            ):
                raise ResourceConflictError("User already exists", code="USER_EXISTS")
            now = _now()
            user = user.model_copy(update={"created_at": user.created_at or now, "updated_at": now})
            rows.append(user.model_dump(mode="json"))
            self.collection.write(rows)
        return user

    def save(self, user: UserRecord) -> UserRecord:
        with self.collection.lock:
            rows = self.collection.read()
            if any(row.get("id") != user.id and _same_employee_id(row, user) for row in rows):
                raise ResourceConflictError("Employee ID already in use", code="EMPLOYEE_ID_EXISTS")
            user = user.model_copy(update={"updated_at": _now()})
            for i, row in enumerate(rows):
                if row.get("id") == user.id:
                    rows[i] = user.model_dump(mode="json")
                    break
            self.collection.write(rows)
        return user


class JsonResourceRepository(ResourceRepository):
    def __init__(self, collection: JsonCollection, resource_type: str):
        super().__init__(resource_type)
        self.collection = collection

    def _item(self, row: Dict[str, Any]) -> ResourceItem:
        return ResourceItem.model_validate({**row, "resource_type": self.resource_type})

    def list(self) -> List[ResourceItem]:
        return [self._item(row) for row in reversed(self.collection.read())]

    def get(self, item_id: str) -> Optional[ResourceItem]:
        row = next((r for r in self.collection.read() if r.get("id") == item_id), None)
        return self._item(row) if row else None

    def create(self, data: Dict[str, Any]) -> ResourceItem:
        now = _now()
        item = ResourceItem(
            id=str(uuid.uuid4()),
            resource_type=self.resource_type,
            data=data,
            created_at=now,
            updated_at=now,
        )
        with self.collection.lock:
            rows = self.collection.read()
            rows.append(item.model_dump(mode="json"))
            self.collection.write(rows)
        return item

    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[ResourceItem]:
        with self.collection.lock:
            rows = self.collection.read()
            for i, row in enumerate(rows):
                if row.get("id") == item_id:
                    item = self._item(row)
                    item = item.model_copy(update={"data": {**item.data, **changes}, "updated_at": _now()})
                    rows[i] = item.model_dump(mode="json")
                    self.collection.write(rows)
                    return item
        return None

    def delete(self, item_id: str) -> Optional[ResourceItem]:
        with self.collection.lock:
            rows = self.collection.read()
            for i, row in enumerate(rows):
                if row.get("id") == item_id:
                    del rows[i]
                    self.collection.write(rows)
                    return self._item(row)
        return None


class JsonStore(Store):
    """Store over ``<data_dir>/users.json`` and one file per resource type."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self.users = JsonUserRepository(JsonCollection(self.data_dir / "users.json"))

    def resources(self, resource_type: str) -> ResourceRepository:
        if resource_type not in RESOURCE_TYPES:
            raise ValueError(f"Unknown resource type '{resource_type}'")
        return JsonResourceRepository(JsonCollection(self.data_dir / f"{resource_type}.json"), resource_type)
