# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="buildsmart-test-"))
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEMO_LOGIN_ENABLED", "true")

from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from buildsmart.core.roles import Role
from buildsmart.db.seeds.seed_demo_users import seed_demo_users
from buildsmart.db.session import init_db
from buildsmart.main import create_app
from buildsmart.repositories import JsonStore, SqlStore, Store, get_store
from buildsmart.schemas.schemas import UserRecord
from buildsmart.services.auth_service import DEMO_USERS

DEMO_PASSWORD = "demo123"


@pytest.fixture(params=["sql", "json"])
def store_factory(request, tmp_path) -> Generator[Callable[[], Store], None, None]:
    """Factory for stores sharing one backend; runs each test on both backends."""
    if request.param == "sql":
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        init_db(engine)
        SessionTest = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        yield lambda: SqlStore(SessionTest())
        engine.dispose()
    else:
        data_dir = tmp_path / "data"
        yield lambda: JsonStore(str(data_dir))


@pytest.fixture
def store(store_factory) -> Generator[Store, None, None]:
    s = store_factory()
    yield s
    s.close()


@pytest.fixture
def app(store_factory):
    """Create a test FastAPI application instance bound to the test store."""
    application = create_app()

    def override_get_store():
        s = store_factory()
        try:
            yield s
        finally:
            s.close()

    application.dependency_overrides[get_store] = override_get_store
    return application


@pytest.fixture
def client(app) -> TestClient:
    """Test client; lifespan is skipped so storage comes only from fixtures."""
    return TestClient(app)


@pytest.fixture
def demo_users(store) -> Dict[Role, UserRecord]:
    """The four demo users, provisioned with password ``demo123``."""
    seed_demo_users(store, DEMO_PASSWORD)
    return {role: store.users.get_by_email(demo["email"]) for role, demo in DEMO_USERS.items()}


@pytest.fixture
def login(client, demo_users) -> Callable[[Role], str]:
    """Log in as a demo role through the API and return the token."""

    def _login(role: Role) -> str:
        response = client.post(
            "/api/auth/login",
            json={"email": DEMO_USERS[role]["email"], "password": DEMO_PASSWORD},
        )
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _login


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
