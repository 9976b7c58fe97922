"""Database session management utilities."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_finder.models.base import Base
from clinic_finder.utils.config import get_settings

settings = get_settings()


def _engine_options(database_url: str) -> Dict[str, Any]:
    """SQLite needs cross-thread access and, in memory, a single shared connection."""

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(
    settings.database_url,
    future=True,
    echo=settings.database_echo,
    **_engine_options(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""

    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Commit the work done inside the block, or roll all of it back."""

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def init_db() -> None:
    """Create every table known to the declarative base."""

    from clinic_finder.models import appointment, clinic, doctor, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def drop_db() -> None:
    """Drop every table known to the declarative base."""

    Base.metadata.drop_all(bind=engine)
