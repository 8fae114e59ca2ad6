"""User model."""

import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Text, func
from buildsmart.db.base import Base


class User(Base):
    """Site user: credential record plus profile."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="Worker", index=True)
    site = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)
    permissions_json = Column(Text, nullable=False, default="[]")  # JSON list of permission names
    employee_id = Column(String(50), unique=True, nullable=True)
    department = Column(String(100), nullable=False, default="Construction")
    phone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
