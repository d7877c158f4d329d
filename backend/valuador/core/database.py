"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the database used by the backend.
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.
- Provide the single declarative `Base` shared by every ORM model.

Key Characteristics:
- Synchronous SQLAlchemy engine.
- No Alembic migrations — `init_db()` creates missing tables at startup.
- Session is opened at the start of a request and closed after the response.

This module does NOT:
- Define ORM models (see valuador/models/*).
- Perform any queries or business logic.
"""

from typing import Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from valuador.core.config import settings
from valuador.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def normalize_database_url(db_url: str) -> str:
    """
    Use psycopg (v3) for Postgres: postgresql:// → postgresql+psycopg://
    Other URLs (sqlite, explicit drivers) are returned unchanged.
    """
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        return db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_url


def build_engine(db_url: str) -> Engine:
    """Create an engine with per-dialect connection arguments."""
    db_url = normalize_database_url(db_url)
    connect_args = {}
    if db_url.startswith("sqlite"):
        # Background tasks use their own sessions from a worker thread
        connect_args["check_same_thread"] = False

    return create_engine(
        db_url,
        pool_pre_ping=True,  # Ensures connections are valid before use
        connect_args=connect_args,
    )

# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------

engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def init_db(bind: Engine = None) -> None:
    """Create all tables registered on `Base` (idempotent)."""
    # Import models so they register on Base.metadata
    from valuador.models import job, scenario, valuation  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Database tables ensured on %s", target.url.render_as_string(hide_password=True))

# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            db.query(...)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    """
    FastAPI dependency: the session factory handed to background tasks,
    which must open their own session after the request one is closed.
    """
    return SessionLocal
