"""SQLAlchemy-backed repositories."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from buildsmart.core.exceptions import ResourceConflictError
from buildsmart.core.roles import Role
from buildsmart.models.resource import ResourceRecord
from buildsmart.models.user import User
from buildsmart.repositories.base import ResourceRepository, Store, UserRepository
from buildsmart.schemas.schemas import ResourceItem, UserRecord

_USER_COLUMNS = (
    "id", "name", "email", "hashed_password", "site", "avatar", "employee_id",
    "department", "phone", "is_active", "last_login_at",
)


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        role=Role(row.role),
        site=row.site,
        avatar=row.avatar,
        permissions=json.loads(row.permissions_json or "[]"),
        employee_id=row.employee_id,
        department=row.department,
        phone=row.phone,
        is_active=row.is_active,
        last_login_at=row.last_login_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _apply(row: User, user: UserRecord) -> None:
    for column in _USER_COLUMNS:
        setattr(row, column, getattr(user, column))
    row.role = user.role.value
    row.permissions_json = json.dumps([p.value for p in user.permissions])


class SqlUserRepository(UserRepository):
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        row = self.db.get(User, user_id)
        return _to_record(row) if row else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        row = self.db.query(User).filter(User.email == email).first()
        return _to_record(row) if row else None

    def list(
        self,
        role: Optional[Role] = None,
        site: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[UserRecord]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role.value)
        if site is not None:
            query = query.filter(User.site == site)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.name.ilike(pattern),
                User.email.ilike(pattern),
                User.employee_id.ilike(pattern),
            ))
        rows = query.order_by(User.created_at.desc()).all()
        return [_to_record(row) for row in rows]

    def add(self, user: UserRecord) -> UserRecord:
        row = User()
        _apply(row, user)
        row.created_at = user.created_at or datetime.now(timezone.utc)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ResourceConflictError("User already exists", code="USER_EXISTS")
        self.db.refresh(row)
        return _to_record(row)

    def save(self, user: UserRecord) -> UserRecord:
        row = self.db.get(User, user.id)
        _apply(row, user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ResourceConflictError("Employee ID already in use", code="EMPLOYEE_ID_EXISTS")
        self.db.refresh(row)
        return _to_record(row)

    def count_by_role(self) -> Dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}


def _to_item(row: ResourceRecord) -> ResourceItem:
    return ResourceItem(
        id=row.id,
        resource_type=row.resource_type,
        data=json.loads(row.data_json or "{}"),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlResourceRepository(ResourceRepository):
    def __init__(self, db: Session, resource_type: str):
        super().__init__(resource_type)
        self.db = db

    def _row(self, item_id: str) -> Optional[ResourceRecord]:
        return (
            self.db.query(ResourceRecord)
            .filter(ResourceRecord.id == item_id, ResourceRecord.resource_type == self.resource_type)
            .first()
        )

    def list(self) -> List[ResourceItem]:
        rows = (
            self.db.query(ResourceRecord)
            .filter(ResourceRecord.resource_type == self.resource_type)
            .order_by(ResourceRecord.created_at.desc())
            .all()
        )
        return [_to_item(row) for row in rows]

    def get(self, item_id: str) -> Optional[ResourceItem]:
        row = self._row(item_id)
        return _to_item(row) if row else None

    def create(self, data: Dict[str, Any]) -> ResourceItem:
        row = ResourceRecord(
            resource_type=self.resource_type,
            data_json=json.dumps(data, default=str),
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _to_item(row)

    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[ResourceItem]:
        row = self._row(item_id)
        if not row:
            return None
        data = json.loads(row.data_json or "{}")
        data.update(changes)
        row.data_json = json.dumps(data, default=str)
        row.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(row)
        return _to_item(row)

    def delete(self, item_id: str) -> Optional[ResourceItem]:
        row = self._row(item_id)
        if not row:
            return None
        item = _to_item(row)
        self.db.delete(row)
        self.db.commit()
        return item


class SqlStore(Store):
    def __init__(self, db: Session):
        self.db = db
        self.users = SqlUserRepository(db)

    def resources(self, resource_type: str) -> ResourceRepository:
        return SqlResourceRepository(self.db, resource_type)

    def close(self) -> None:
        self.db.close()
