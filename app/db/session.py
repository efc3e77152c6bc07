"""Engine and session factory.

The engine is built from ``settings.app.database_url``. SQLite URLs get
``check_same_thread=False`` because FastAPI runs sync endpoints in a worker
thread pool, and foreign keys are switched on so cascades behave as they do
on PostgreSQL.
"""

from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.db.base import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, echo: bool = False, **kwargs) -> Engine:
    """Create an engine for ``url`` with dialect-specific tweaks.

    Args:
        url: SQLAlchemy database URL.
        echo: Log emitted SQL.
        **kwargs: Extra keyword arguments for ``create_engine`` (e.g. poolclass).

    Returns:
        Configured SQLAlchemy engine.
    """
    connect_args: dict = kwargs.pop("connect_args", {})
    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)

    engine = create_engine(url, echo=echo, connect_args=connect_args, **kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


engine = build_engine(settings.app.database_url, echo=settings.app.database_echo)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they register on Base.metadata.
    import app.models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("db.initialized", extra={"dialect": target.dialect.name})


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a database session.

    The session is always closed when the request finishes; services own
    their transaction boundaries.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
