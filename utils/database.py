"""
Database utilities and engine management.

This module provides the core database engine that can be used by any layer:
- API routes
- Services
- Repositories
- Scripts

No dependencies on higher-level modules (api, services, events).
"""

from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session, SQLModel

from config.settings import settings


def build_engine(db_url: str) -> Engine:
    """
    Create an engine for ``db_url``.

    Note:
        Postgres URLs use the psycopg (v3) driver with client-side prepared
        statements disabled for PgBouncer/connection pooler compatibility.
        SQLite engines allow use from worker threads, since store calls run
        through asyncio.to_thread.
    """
    # Convert postgresql:// to postgresql+psycopg:// for psycopg3 driver
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)

    if db_url.startswith("sqlite"):
        return create_engine(db_url, connect_args={"check_same_thread": False})

    return create_engine(
        db_url,
        connect_args={
            "prepare_threshold": None,  # Disable prepared statements for pooler compatibility
            "connect_timeout": 10,      # Fail fast if the pooler is slow
        },
        pool_pre_ping=True,  # Verify connection before use
        pool_recycle=300,
        pool_size=3,
        max_overflow=2,
        pool_timeout=30,     # Wait up to 30s for a connection from pool
    )


@lru_cache()
def get_engine() -> Engine:
    """
    Get cached database engine.

    Returns:
        SQLAlchemy engine singleton
    """
    return build_engine(settings.DATABASE_URL)


def init_db(engine: Optional[Engine] = None) -> Engine:
    """Create all tables that do not exist yet (local development and tests)."""
    # Register table models on SQLModel.metadata
    import models  # noqa: F401

    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine)
    return engine


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Yields:
        SQLModel Session that auto-closes after request

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...
    """
    engine = get_engine()
    with Session(engine) as session:
        yield session
