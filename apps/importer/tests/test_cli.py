"""Tests for CLI commands."""

import json
import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine, inspect

from ledgersync_importer.cli import cli
from ledgersync_importer.db.session import get_engine
from ledgersync_importer.errors import SetupError
from ledgersync_importer.settings import get_settings


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Point settings at a SQLite file and reset cached settings."""
    database_url = f"sqlite:///{tmp_path / 'ledger.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_FORMAT", "text")
    get_settings.cache_clear()
    get_engine.cache_clear()
    root_handlers = logging.root.handlers[:]
    root_level = logging.root.level
    yield database_url
    # The commands reconfigure root logging.
    logging.root.handlers[:] = root_handlers
    logging.root.setLevel(root_level)
    get_settings.cache_clear()
    get_engine.cache_clear()


def test_init_db_creates_tables(env, monkeypatch, tmp_path):
    columns_path = tmp_path / "columns.json"
    columns_path.write_text(
        json.dumps({"input_columns": [{"name": "amount_copy", "path": "amount", "type": "integer"}]}),
        encoding="utf-8",
    )
    monkeypatch.setenv("CUSTOM_COLUMNS_PATH", str(columns_path))
    get_settings.cache_clear()

    result = CliRunner().invoke(cli, ["init-db"])

    assert result.exit_code == 0, result.output
    engine = create_engine(env)
    inspector = inspect(engine)
    assert {"transactions", "transaction_inputs", "transaction_outputs"} <= set(
        inspector.get_table_names()
    )
    input_columns = [column["name"] for column in inspector.get_columns("transaction_inputs")]
    assert input_columns[-1] == "amount_copy"
    engine.dispose()


def test_init_db_rejects_bad_column_config(env, monkeypatch, tmp_path):
    columns_path = tmp_path / "columns.json"
    columns_path.write_text(
        json.dumps({"output_columns": [{"name": "spent", "path": "amount", "type": "integer"}]}),
        encoding="utf-8",
    )
    monkeypatch.setenv("CUSTOM_COLUMNS_PATH", str(columns_path))
    get_settings.cache_clear()

    result = CliRunner().invoke(cli, ["init-db"])

    assert result.exit_code == 1


def test_run_exits_when_feed_setup_fails(env):
    with patch(
        "ledgersync_importer.cli.FeedCursorManager.connect",
        side_effect=SetupError("Failed to create transaction feed"),
    ), patch("ledgersync_importer.cli.ImportLoop.run_forever") as run_forever:
        result = CliRunner().invoke(cli, ["run"])

    assert result.exit_code == 1
    assert "Startup failed" in result.output
    run_forever.assert_not_called()


def test_run_refuses_development_defaults_in_production(monkeypatch, env):
    monkeypatch.delenv("DATABASE_URL")
    monkeypatch.setenv("ENVIRONMENT", "production")
    get_settings.cache_clear()

    with patch("ledgersync_importer.cli.FeedCursorManager.connect") as connect:
        result = CliRunner().invoke(cli, ["run"])

    assert result.exit_code == 1
    connect.assert_not_called()
