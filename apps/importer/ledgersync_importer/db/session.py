"""Database session management."""

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ledgersync_importer.settings import get_settings


@lru_cache()
def get_engine() -> Engine:
    """Get the process-wide engine."""
    url = get_settings().database_url_computed
    if url.startswith("sqlite"):
        return create_engine(url)
    # The importer is a single sequential consumer.
    return create_engine(url, pool_pre_ping=True, pool_size=2, max_overflow=0)


def make_session_factory(engine: Engine) -> sessionmaker:
    """Build a session factory bound to engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
