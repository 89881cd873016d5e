"""CLI commands for the ledgersync importer."""

import logging
import signal
import sys
import threading

import click
from prometheus_client import start_http_server

from ledgersync_sdk import FeedClient

from ledgersync_importer.columns import load_column_config
from ledgersync_importer.db.schema import build_tables
from ledgersync_importer.db.session import get_engine, make_session_factory
from ledgersync_importer.errors import ConfigError, SetupError
from ledgersync_importer.feed.cursor import FeedCursorManager
from ledgersync_importer.ingest.loop import ImportLoop
from ledgersync_importer.ingest.writer import BatchWriter
from ledgersync_importer.settings import Settings, get_settings

JSON_LOG_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"message": "%(message)s", "module": "%(name)s"}'
)
TEXT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    log_format = JSON_LOG_FORMAT if settings.log_format == "json" else TEXT_LOG_FORMAT
    logging.basicConfig(
        level=settings.log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


@click.group()
def cli():
    """Ledger transaction feed importer."""
    pass


@cli.command("init-db")
def init_db():
    """Create the import tables if they do not exist."""
    settings = get_settings()
    configure_logging(settings)
    try:
        tables = build_tables(load_column_config(settings.custom_columns_path))
        tables.create_all(get_engine())
    except ConfigError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    click.echo("✓ Import tables ready.")


@cli.command()
def run():
    """Import transactions from the feed until terminated."""
    settings = get_settings()
    configure_logging(settings)

    try:
        settings.validate_production_settings()
        tables = build_tables(load_column_config(settings.custom_columns_path))
        client = FeedClient(settings.feed_url, access_token=settings.feed_access_token)
        cursor_manager = FeedCursorManager(client, timeout_ms=settings.feed_timeout_ms)
        feed = cursor_manager.connect(settings.feed_alias, settings.feed_filter)
    except (ValueError, ConfigError, SetupError) as e:
        click.echo(f"✗ Startup failed: {e}", err=True)
        sys.exit(1)

    if settings.metrics_port:
        start_http_server(settings.metrics_port)
        logger.info(f"Serving metrics on port {settings.metrics_port}")

    stopping = threading.Event()

    def _request_stop(signum, frame):
        logger.info(f"Received signal {signum}; stopping after the current page")
        stopping.set()

    signal.signal(signal.SIGTERM, _request_stop)
    signal.signal(signal.SIGINT, _request_stop)

    writer = BatchWriter(make_session_factory(get_engine()), tables)
    ImportLoop(cursor_manager, writer).run_forever(feed, should_stop=stopping.is_set)
    logger.info("Importer stopped")


if __name__ == "__main__":
    cli()
