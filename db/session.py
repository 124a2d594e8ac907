"""
db/session.py

Engine and session lifecycle for the scorecard database.

The engine is built lazily from ``get_database_settings()`` so importing
routers and models never opens a connection. Request handlers get their
session through ``get_db``; scripts use ``session_scope``.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from db.config import DatabaseSettings, get_database_settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def create_db_engine(settings: DatabaseSettings | None = None) -> Engine:
    settings = settings or get_database_settings()
    if not settings.is_postgres:
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    logger.info(
        "Creating engine pool_size=%d max_overflow=%d statement_timeout_ms=%d",
        settings.pool_size,
        settings.max_overflow,
        settings.statement_timeout_ms,
    )
    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle_seconds,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        connect_args=settings.connect_args(),
    )


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def dispose_engine() -> None:
    """Close pooled connections and forget the engine and session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def _get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def SessionLocal() -> Session:
    return _get_session_factory()()


@contextmanager
def session_scope(*, commit: bool = True) -> Iterator[Session]:
    """
    Yield a session that commits on success and rolls back on error.

    With ``commit=False`` the work is always rolled back, which is what a
    dry run needs.
    """
    db = SessionLocal()
    try:
        yield db
        if commit:
            db.commit()
        else:
            db.rollback()
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
