"""Database configuration and helpers for the event admin backend."""

from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

DATABASE_URL = settings.database_url

logger = logging.getLogger("eventadmin.db")


def build_engine(url: str) -> Engine:
    """Create an engine, relaxing SQLite's same-thread check for worker threads."""

    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator:
    """Yield a SQLAlchemy session and ensure it is closed."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create database tables if they do not exist."""

    import app.db_models  # noqa: F401 - models are imported for side effects

    Base.metadata.create_all(bind=bind or engine)
    logger.debug("Schema ensured on %s", (bind or engine).url)
