"""
storefront/database.py
──────────────────────
Database engine + session factory using SQLModel.

• Engine is created once at import time from Settings.
• get_session() is a FastAPI dependency that yields a managed
  session (rolled back on error, always closed).
• create_db_and_tables() is called from the lifespan hook in main.py.
"""

from collections.abc import Generator

from sqlalchemy import text
from sqlmodel import Session, SQLModel, create_engine

from storefront import models  # noqa: F401  (registers tables on SQLModel.metadata)
from storefront.core.config import get_settings

settings = get_settings()

# SQLite needs check_same_thread=False; other drivers do not.
_connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.APP_DEBUG,       # SQL logging only in debug mode
    connect_args=_connect_args,
)


def create_db_and_tables() -> None:
    """Create all tables declared in SQLModel models."""
    SQLModel.metadata.create_all(engine)


def ping(session: Session) -> None:
    """Round-trip a trivial query; raises if the database is unreachable."""
    session.connection().execute(text("SELECT 1"))


def get_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.
    The 'with' block ensures the session is always closed and any
    uncommitted transaction is rolled back on exception.
    """
    with Session(engine) as session:
        yield session
