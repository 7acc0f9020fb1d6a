"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
``settings.DATABASE_URL`` (a local SQLite file by default) and provides
small helpers used by the application and tests. The engine is created
once at import time; every request gets its own ``Session``.
"""

from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy import delete

from .config import settings
from . import models

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, echo=False, connect_args=_connect_args)


def create_db_and_tables():
    """Create database tables using SQLModel metadata.

    Safe to call repeatedly; existing tables are left untouched.
    """
    SQLModel.metadata.create_all(engine)


def clear_all_tables():
    """Delete every row from every table. Used by the test suite."""
    with Session(engine) as session:
        for model in (models.Score, models.DailyChallenge, models.User):
            session.exec(delete(model))
        session.commit()


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
