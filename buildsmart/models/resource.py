"""Generic site resource row (tasks, materials, workforce, safety alerts)."""

import uuid

from sqlalchemy import Column, String, Text, DateTime, func
from buildsmart.db.base import Base


class ResourceRecord(Base):
    """One site resource; the payload is a free-form JSON document."""
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_type = Column(String(50), nullable=False, index=True)
    data_json = Column(Text, nullable=False, default="{}")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
