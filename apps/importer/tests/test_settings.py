"""Tests for importer settings."""

import pytest

from ledgersync_importer.settings import Settings


def test_database_url_computed_from_parts():
    settings = Settings(
        _env_file=None,
        postgres_user="sync",
        postgres_password="pw",
        postgres_host="db",
        postgres_db="ledger",
    )
    assert settings.database_url_computed == "postgresql://sync:pw@db:5432/ledger"


def test_explicit_database_url_wins():
    settings = Settings(_env_file=None, database_url="sqlite:///ledger.db")
    assert settings.database_url_computed == "sqlite:///ledger.db"


def test_development_allows_defaults():
    Settings(_env_file=None, environment="development").validate_production_settings()


def test_production_requires_database_password():
    settings = Settings(_env_file=None, environment="production", feed_access_token="a:b")
    with pytest.raises(ValueError):
        settings.validate_production_settings()


def test_production_requires_feed_token():
    settings = Settings(_env_file=None, environment="production", postgres_password="strong")
    with pytest.raises(ValueError):
        settings.validate_production_settings()

    settings = Settings(
        _env_file=None,
        environment="production",
        postgres_password="strong",
        feed_access_token="importer:secret",
    )
    settings.validate_production_settings()
