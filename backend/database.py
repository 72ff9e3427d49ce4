"""Database setup and session management for the hosted preferences tier."""

import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def is_hosted_store_configured() -> bool:
    """Return True when a hosted database URL is configured."""
    return bool(settings.DATABASE_URL.strip())


@lru_cache
def get_engine() -> Engine | None:
    """Get or create the hosted-tier engine (cached).

    Returns ``None`` when ``DATABASE_URL`` is empty, which callers treat
    as "hosted tier not configured" rather than an error.
    """
    if not is_hosted_store_configured():
        logger.info("DATABASE_URL not set, preferences use the JSON file tier")
        return None

    database_url = settings.DATABASE_URL
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=False,
    )
    logger.info("Hosted preferences engine created (%s)", engine.dialect.name)
    return engine


def get_session_local():
    """Get a sessionmaker bound to the hosted engine, or ``None`` if unconfigured."""
    engine = get_engine()
    if engine is None:
        return None
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create hosted-tier tables if the hosted store is configured."""
    engine = get_engine()
    if engine is None:
        return

    # Register models on Base.metadata before create_all
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
