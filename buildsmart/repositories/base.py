"""Repository interfaces shared by the SQL and JSON-file backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from buildsmart.core.roles import Role
from buildsmart.schemas.schemas import ResourceItem, UserRecord

RESOURCE_TYPES = ("tasks", "materials", "workforce", "safety")


class UserRepository(ABC):
    """Credential records keyed by id, unique on lower-cased email."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def list(
        self,
        role: Optional[Role] = None,
        site: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[UserRecord]:
        """Users matching all given filters, newest first."""

    @abstractmethod
    def add(self, user: UserRecord) -> UserRecord:
        """Insert a new user. Raises ResourceConflictError on duplicate email."""

    @abstractmethod
    def save(self, user: UserRecord) -> UserRecord:
        """Persist every field of an existing user."""

    def count_by_role(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for user in self.list():
            counts[user.role.value] = counts.get(user.role.value, 0) + 1
        return counts

    @staticmethod
    def matches(
        user: UserRecord,
        role: Optional[Role],
        site: Optional[str],
        is_active: Optional[bool],
        search: Optional[str],
    ) -> bool:
        if role is not None and user.role != role:
            return False
        if site is not None and user.site != site:
            return False
        if is_active is not None and user.is_active != is_active:
            return False
        if search:
            needle = search.lower()
            haystack = (user.name, user.email, user.employee_id or "")
            if not any(needle in field.lower() for field in haystack):
                return False
        return True


class ResourceRepository(ABC):
    """CRUD over one resource type; payloads are free-form dicts."""

    def __init__(self, resource_type: str):
        self.resource_type = resource_type

    @abstractmethod
    def list(self) -> List[ResourceItem]:
        ...

    @abstractmethod
    def get(self, item_id: str) -> Optional[ResourceItem]:
        ...

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> ResourceItem:
        ...

    @abstractmethod
    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[ResourceItem]:
        """Merge ``changes`` into the stored payload. None if missing."""

    @abstractmethod
    def delete(self, item_id: str) -> Optional[ResourceItem]:
        """Remove and return the item. None if missing."""


class Store(ABC):
    """Bundle of repositories sharing one backend connection."""

    users: UserRepository

    @abstractmethod
    def resources(self, resource_type: str) -> ResourceRepository:
        ...

    def close(self) -> None:
        pass
