"""
Database session management
"""
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.orm import Session

from planvision.db.base import SessionLocal


@contextmanager
def session_scope(session_factory: Callable[[], Session] = SessionLocal) -> Iterator[Session]:
    """
    Open a short-lived session and always close it
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def create_db_and_tables(bind=None):
    """
    Create database tables
    """
    from planvision.db.base import Base, engine
    import planvision.models  # noqa: F401  registers the mappers

    Base.metadata.create_all(bind=bind or engine)
