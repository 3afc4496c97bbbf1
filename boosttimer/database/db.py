"""SQLite connection for the todo store.

One lazily created engine per process.  ``configure_engine`` swaps it
out (tests point it at ``sqlite:///:memory:``).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .. import settings
from .models import Base

logger = logging.getLogger(__name__)

DB_FILENAME = "boosttimer.db"

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def database_url() -> str:
    """Default location: ``<app dir>/boosttimer.db``."""
    return f"sqlite:///{settings.APP_SUPPORT_DIR / DB_FILENAME}"


def _build_engine(url: str) -> Engine:
    if url.endswith(":memory:"):
        # every session must see the same in-memory database
        return create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool,
        )
    return create_engine(url, connect_args={"check_same_thread": False})


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        settings.APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(database_url())
        logger.info("Opened database %s", _engine.url)
    return _engine


def configure_engine(url: str) -> None:
    """Point the store at *url*, dropping any engine already open."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = _build_engine(url)
    _session_factory = None


def init_db() -> None:
    """Create the tables if they are missing."""
    Base.metadata.create_all(_get_engine())


@contextmanager
def get_session() -> Iterator[Session]:
    """Yield a session; commit on success, rollback on error."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
