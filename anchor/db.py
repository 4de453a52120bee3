# FILE: anchor/db.py
"""
Database engine and session helpers.

Request handlers get a session through the get_db() dependency. Work that
runs outside a request (startup seeding, background embedding refreshes)
opens its own session with session_scope() so it never shares a session
with a request that may already be closed.
"""
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from anchor import config

engine = create_engine(
    config.DATABASE_URL,
    # Required for SQLite when sessions cross threads (threadpool handlers)
    connect_args={"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {},
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

SessionFactory = Callable[[], Session]


def get_db():
    """FastAPI dependency that yields a DB session and closes it after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: Optional[SessionFactory] = None) -> Iterator[Session]:
    """Open a short-lived session; rolls back on error and always closes."""
    db = (factory or SessionLocal)()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """Create all tables. Call once at startup."""
    # Import models so Base.metadata knows about them
    from anchor.knowledge import models  # noqa: F401
    if config.DATABASE_URL.startswith("sqlite:///./"):
        config.DATA_DIR.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
