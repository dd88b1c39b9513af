"""Database engine and helpers.

This module configures the SQLModel/SQLAlchemy engine from
`settings.DATABASE_URL` and provides small helpers used by the
application, the seed script and tests. By default the database is a
SQLite file `cleaning.db` next to the `cleaning` package; the URL
`sqlite://` selects an in-memory database shared by every session.
"""

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from .config import settings


def build_engine(url: str, echo: bool = False):
    """Create an engine for `url` with the SQLite options the app needs."""
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one connection, otherwise each session would get its own empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=echo, **kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)


def create_db_and_tables():
    """Create database tables using SQLModel metadata.

    Table creation is idempotent; existing tables are left untouched.
    """
    # register table classes on the metadata before creating
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session
