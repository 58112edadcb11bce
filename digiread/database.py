"""
Database Setup

Synchronous SQLAlchemy 2.0 with one session per request: get_db opens a
session, the handler commits where it decides to, and the session is closed
when the response is done.

Each row write is atomic on its own; the sign-in flow does not wrap its
lookup, delete and update steps in one transaction.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from digiread.config import get_settings

settings = get_settings()

# pool_pre_ping drops connections the server closed while idle
engine = create_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    echo=settings.debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base; Alembic autogenerate reads Base.metadata."""


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
