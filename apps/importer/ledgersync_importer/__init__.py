"""Ledger transaction feed importer."""

__version__ = "0.1.0"
