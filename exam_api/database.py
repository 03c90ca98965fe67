"""Database utilities and setup."""
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from exam_api.config import DATABASE_URL


def make_engine(url: str):
    """Create an engine; SQLite connections are shared across threads."""
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )


engine = make_engine(DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base class for models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def init_db(bind=None):
    """Initialize database (create all tables)."""
    # Registers the mapped tables on Base.metadata
    from exam_api.models.db import TestRecord  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
