"""Pytest configuration and fixtures for importer tests."""

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from ledgersync_importer.columns import ColumnConfig
from ledgersync_importer.db.schema import build_tables
from ledgersync_importer.db.session import make_session_factory
from ledgersync_importer.feed.cursor import FeedCursorManager
from ledgersync_importer.ingest.loop import ImportLoop
from ledgersync_importer.ingest.writer import BatchWriter
from tests.fakes import FakeFeedService


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def column_config() -> ColumnConfig:
    """Custom columns; override in a test module to add some."""
    return ColumnConfig()


@pytest.fixture
def tables(engine, column_config):
    """Import tables created in the test database."""
    tables = build_tables(column_config)
    tables.create_all(engine)
    return tables


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def writer(session_factory, tables) -> BatchWriter:
    return BatchWriter(session_factory, tables)


@pytest.fixture
def feed_service() -> FakeFeedService:
    return FakeFeedService()


@pytest.fixture
def cursor_manager(feed_service) -> FeedCursorManager:
    return FeedCursorManager(feed_service, timeout_ms=1000)


@pytest.fixture
def import_loop(cursor_manager, writer) -> ImportLoop:
    return ImportLoop(cursor_manager, writer)


@pytest.fixture
def count_rows(engine):
    """Return the number of rows in a table."""

    def _count(table) -> int:
        with engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()

    return _count
