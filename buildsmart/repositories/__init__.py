"""Storage backends behind a common repository interface."""

from typing import Generator

from buildsmart.core.config import settings
from buildsmart.repositories.base import ResourceRepository, Store, UserRepository
from buildsmart.repositories.json_store import JsonStore
from buildsmart.repositories.sql_store import SqlStore

__all__ = [
    "ResourceRepository", "Store", "UserRepository",
    "JsonStore", "SqlStore", "get_store", "open_store",
]


def open_store() -> Store:
    """Open the store selected by STORAGE_BACKEND. Caller must close it."""
    if settings.STORAGE_BACKEND == "json":
        return JsonStore(settings.DATA_DIR)
    if settings.STORAGE_BACKEND == "sql":
        from buildsmart.db.session import SessionLocal

        return SqlStore(SessionLocal())
    raise ValueError(f"Unknown STORAGE_BACKEND '{settings.STORAGE_BACKEND}'")


def get_store() -> Generator[Store, None, None]:
    """FastAPI dependency that provides a store per request."""
    store = open_store()
    try:
        yield store
    finally:
        store.close()
