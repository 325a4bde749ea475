"""
db/session.py

Lazily created SQLAlchemy engine and session helpers.

Nothing touches the database at import time; the engine is built on the
first call that needs it, so modules importing ``get_db`` stay importable
without a configured URL.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import get_database_settings, redact_database_url

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_database_settings()
        _engine = create_engine(
            settings.url,
            echo=settings.echo,
            pool_pre_ping=True,
            pool_recycle=settings.pool_recycle,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
        )
        logger.info("Database engine created for %s", redact_database_url(settings.url))
    return _engine


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def SessionLocal() -> Session:
    """Lazy session factory. Drop-in replacement for a sessionmaker() call."""
    return _get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Session for work outside a request (scheduled jobs, refresh ticks).

    Closed on exit; committing is left to the caller.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with session_scope() as db:
        yield db


def check_connection() -> None:
    """Run ``SELECT 1``; raises RuntimeError if the database is unreachable."""
    try:
        with session_scope() as db:
            db.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc
