"""Database engine, session factory and schema helpers."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from buildsmart.core.config import settings


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.DEBUG,
        )
    return create_engine(
        url,
        pool_size=20,
        max_overflow=40,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )


engine = build_engine(settings.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create all tables that don't exist yet."""
    import buildsmart.models  # noqa: F401  registers models on Base.metadata
    from buildsmart.db.base import Base

    Base.metadata.create_all(bind=bind)


def drop_db(bind: Engine = engine) -> None:
    import buildsmart.models  # noqa: F401
    from buildsmart.db.base import Base

    Base.metadata.drop_all(bind=bind)
