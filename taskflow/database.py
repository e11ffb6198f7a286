from contextlib import contextmanager
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import DATABASE_URL

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task, User  # noqa: F401

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine for ``url``.

    In-memory SQLite shares one connection across threads so every session
    sees the same database.
    """
    if _is_memory_sqlite(url):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Hosted Postgres: disable pooling for serverless and enable pre-ping
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        poolclass=NullPool,
    )


def build_sessionmaker(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, class_=Session, autocommit=False, autoflush=False, expire_on_commit=False)


engine = build_engine()

SessionLocal = build_sessionmaker(engine)


def get_db():
    """Dependency to get a database session; rolls back if the request fails."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_session():
    """Get a database session (context manager style).

    This is a convenience function for use outside of FastAPI dependencies.
    Usage:
        with get_session() as session:
            # do something with session
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_tables(bind: Engine = engine) -> None:
    """Create all database tables."""
    logger.info("Creating tables on %s", bind.url.render_as_string(hide_password=True))
    SQLModel.metadata.create_all(bind=bind)
