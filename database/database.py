import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str, pool_pre_ping: bool = True, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across the worker threads, and an
    in-memory database must stay on a single connection to be visible
    to all of them.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=pool_pre_ping,  # Verify connections before using
        pool_size=10,
        max_overflow=20,
        echo=echo
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables. Existing tables are left as they are."""
    Base.metadata.create_all(engine)
    logger.info("Database schema ensured")
